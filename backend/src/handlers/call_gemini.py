import base64
import json
import os
import boto3
import requests
import urllib.parse
from botocore.config import Config

DEFAULT_MODEL = "gemini-1.5-flash-latest"
DEFAULT_API_BASE = "https://generativelanguage.googleapis.com"
DEFAULT_API_VERSION = "v1beta"

# --- Padrão Singleton para Clientes (Warm Start) ---
_HTTP_SESSION = None
_SECRETS_CLIENT = None

# Cache por secret id: a chave não muda durante a vida do container
_SECRET_CACHE = {}


class InvalidRequestBody(ValueError):
    pass


def get_http_session():
    global _HTTP_SESSION
    if _HTTP_SESSION is None:
        _HTTP_SESSION = requests.Session()
    return _HTTP_SESSION


def get_secrets_client():
    global _SECRETS_CLIENT
    if _SECRETS_CLIENT is None:
        config = Config(retries={'max_attempts': 3, 'mode': 'standard'})
        _SECRETS_CLIENT = boto3.client("secretsmanager", config=config)
    return _SECRETS_CLIENT


def get_api_key(secrets_client=None):
    """
    Variável de ambiente tem prioridade.
    Sem ela, busca no Secrets Manager (GEMINI_API_KEY_SECRET_ID).
    """
    api_key = os.environ.get("GEMINI_API_KEY")
    if api_key:
        return api_key

    secret_id = os.environ.get("GEMINI_API_KEY_SECRET_ID")
    if not secret_id:
        return None

    if secret_id not in _SECRET_CACHE:
        client = secrets_client if secrets_client else get_secrets_client()
        secret = client.get_secret_value(SecretId=secret_id)
        _SECRET_CACHE[secret_id] = secret.get("SecretString")
    return _SECRET_CACHE[secret_id]


def load_config(secrets_client=None):
    timeout = os.environ.get("GEMINI_TIMEOUT_SECONDS")
    return {
        "api_key": get_api_key(secrets_client),
        "model": os.environ.get("GEMINI_MODEL", DEFAULT_MODEL),
        "api_base": os.environ.get("GEMINI_API_BASE", DEFAULT_API_BASE),
        "api_version": os.environ.get("GEMINI_API_VERSION", DEFAULT_API_VERSION),
        "timeout": float(timeout) if timeout else None,
    }


def build_url(config):
    api_base = config.get("api_base", DEFAULT_API_BASE).rstrip("/")
    api_version = config.get("api_version", DEFAULT_API_VERSION)
    model = config.get("model", DEFAULT_MODEL)
    return f"{api_base}/{api_version}/models/{model}:generateContent"


def build_payload(prompt):
    return {"contents": [{"parts": [{"text": prompt}]}]}


def get_method(event):
    # REST API / Netlify usam httpMethod; HTTP API (payload v2) usa requestContext
    method = event.get("httpMethod")
    if not method:
        http = (event.get("requestContext") or {}).get("http") or {}
        method = http.get("method")
    return str(method or "").upper()


def parse_prompt(event):
    raw_body = event.get("body")
    if raw_body is None or raw_body == "":
        raise InvalidRequestBody("Request body is empty.")

    if event.get("isBase64Encoded"):
        raw_body = base64.b64decode(raw_body).decode("utf-8")

    body = json.loads(raw_body)
    if not isinstance(body, dict):
        raise InvalidRequestBody("Request body must be a JSON object.")

    prompt = body.get("prompt")
    if not prompt:
        raise InvalidRequestBody("Prompt is missing from the request body.")
    if not isinstance(prompt, str):
        raise InvalidRequestBody("Prompt must be a string.")
    return prompt


def _response(status_code, body):
    return {
        "statusCode": status_code,
        "headers": {
            "Content-Type": "application/json",
            "Access-Control-Allow-Origin": "*"
        },
        "body": json.dumps(body)
    }


def _error(status_code, message):
    return _response(status_code, {"error": message})


def redact_key(message, api_key):
    # Erros do requests trazem a URL completa, inclusive ?key=...
    message = str(message)
    if api_key:
        for form in {api_key, urllib.parse.quote(api_key, safe=""), urllib.parse.quote_plus(api_key)}:
            message = message.replace(form, "***")
    return message


def lambda_handler(event, context, config=None, http_session=None):
    """
    Proxy de prompt para o Gemini (generateContent).
    Rota: POST /call-gemini  Body: {"prompt": "..."}

    Args:
        config: dict opcional (api_key, model, api_base, api_version, timeout).
        http_session: sessão HTTP opcional para testes.
    """
    api_key = None
    try:
        # 1. Método
        if get_method(event) != "POST":
            return _error(405, "Only POST requests are allowed.")

        # Injeção de Dependência: config explícita (teste) ou ambiente (produção)
        cfg = config if config is not None else load_config()
        session = http_session if http_session else get_http_session()

        # 2. Credencial
        api_key = cfg.get("api_key")
        if not api_key:
            return _error(500, "API key is not set on the server.")

        # 3. Parsing do Input
        try:
            prompt = parse_prompt(event)
        except ValueError as e:
            # InvalidRequestBody, JSON inválido ou base64/utf-8 quebrado
            return _error(400, f"Invalid request body: {e}")

        # 4. Chamada ao Google
        try:
            response = session.post(
                build_url(cfg),
                params={"key": api_key},
                headers={"Content-Type": "application/json"},
                json=build_payload(prompt),
                timeout=cfg.get("timeout")
            )
        except requests.exceptions.RequestException as e:
            message = redact_key(e, api_key)
            print(f"ERRO ao chamar Google API: {message}")
            return _error(500, f"An internal error occurred: {message}")

        # Só 2xx é sucesso (response.ok aceita 3xx)
        if not 200 <= response.status_code < 300:
            # O texto do Google fica só no log, o cliente recebe apenas o status
            print(f"Google API Error: {redact_key(response.text, api_key)}")
            return _error(
                response.status_code,
                f"Failed to fetch from Google API. Status: {response.status_code}"
            )

        # 5. Pass-through do JSON do Google
        return _response(200, response.json())

    except Exception as e:
        message = redact_key(e, api_key)
        print(f"ERRO CRÍTICO: {message}")
        return _error(500, f"An internal error occurred: {message}")
