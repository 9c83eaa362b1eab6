from .serializer import Serializer, to_json, to_yaml

__all__ = ["Serializer", "to_json", "to_yaml"]
