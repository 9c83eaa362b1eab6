# Kubernetes object helpers shared by component implementations.
