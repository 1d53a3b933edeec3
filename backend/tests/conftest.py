import pytest
import boto3
from moto import mock_aws

from handlers import call_gemini

SECRET_ID = "gemini-proxy/api-key-test"


@pytest.fixture(autouse=True)
def clean_gemini_env(monkeypatch):
    """Cada teste começa sem chave no ambiente e sem cache de segredo."""
    for var in (
        "GEMINI_API_KEY",
        "GEMINI_API_KEY_SECRET_ID",
        "GEMINI_MODEL",
        "GEMINI_API_BASE",
        "GEMINI_API_VERSION",
        "GEMINI_TIMEOUT_SECONDS",
    ):
        monkeypatch.delenv(var, raising=False)
    call_gemini._SECRET_CACHE.clear()
    yield
    call_gemini._SECRET_CACHE.clear()


@pytest.fixture(scope="function")
def aws_credentials(monkeypatch):
    """Mocked AWS Credentials for moto."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SECURITY_TOKEN", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")


@pytest.fixture(scope="function")
def secrets_client(aws_credentials):
    with mock_aws():
        conn = boto3.client("secretsmanager", region_name="us-east-1")
        conn.create_secret(Name=SECRET_ID, SecretString="secret-from-sm")
        yield conn


@pytest.fixture
def api_config():
    return {
        "api_key": "test-key-123",
        "model": "gemini-1.5-flash-latest",
        "api_base": "https://generativelanguage.googleapis.com",
        "api_version": "v1beta",
        "timeout": None,
    }
