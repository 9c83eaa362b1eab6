from __future__ import annotations

# Key names expected inside the Secrets referenced by component configurations.

KAFKA_SASL_TYPE = "saslType"
KAFKA_USER = "user"
KAFKA_PASSWORD = "password"
KAFKA_CA_CERT = "ca.crt"
KAFKA_CERT = "user.crt"
KAFKA_KEY = "user.key"

AWS_ACCESS_KEY_ID = "aws_access_key_id"
AWS_SECRET_ACCESS_KEY = "aws_secret_access_key"

DATADOG_API_KEY = "apiKey"

AZURE_TENANT_ID = "tenantID"
AZURE_CLIENT_ID = "clientID"
AZURE_CLIENT_SECRET = "clientSecret"


def secret_key_ref(secret_name: str, key: str) -> dict[str, object]:
    return {"name": secret_name, "key": key}


def secret_key_refs_kafka(secret_name: str) -> tuple[dict[str, object], ...]:
    # (sasl type, user, password, ca cert, cert, key)
    return tuple(
        secret_key_ref(secret_name, key)
        for key in (KAFKA_SASL_TYPE, KAFKA_USER, KAFKA_PASSWORD, KAFKA_CA_CERT, KAFKA_CERT, KAFKA_KEY)
    )


def secret_key_refs_aws(secret_name: str) -> tuple[dict[str, object], dict[str, object]]:
    return secret_key_ref(secret_name, AWS_ACCESS_KEY_ID), secret_key_ref(secret_name, AWS_SECRET_ACCESS_KEY)


def secret_key_refs_datadog(secret_name: str) -> dict[str, object]:
    return secret_key_ref(secret_name, DATADOG_API_KEY)


def secret_key_refs_azure_sp(secret_name: str) -> tuple[dict[str, object], dict[str, object], dict[str, object]]:
    return (
        secret_key_ref(secret_name, AZURE_TENANT_ID),
        secret_key_ref(secret_name, AZURE_CLIENT_ID),
        secret_key_ref(secret_name, AZURE_CLIENT_SECRET),
    )
