[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "stashread"
version = "0.1.0"
description = "Read and verify credstash secrets stored in DynamoDB and sealed with KMS data keys"
requires-python = ">=3.10"
dependencies = [
    "cryptography",
]
keywords = ["credstash", "secrets", "dynamodb", "kms", "aes", "hmac"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Security :: Cryptography",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["stashread"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
