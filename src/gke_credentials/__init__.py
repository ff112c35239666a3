"""Short-lived kubeconfig credentials for GKE clusters in CI/CD jobs."""

__version__ = "0.1.0"
