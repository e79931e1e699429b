"""Read and verify credstash secrets stored in DynamoDB and sealed with KMS data keys."""

__version__ = "0.1.0"
__all__ = ["client", "datasource", "secret"]