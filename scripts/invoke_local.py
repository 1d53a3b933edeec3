import json
import os
import sys
from dotenv import load_dotenv

# Requer o pacote instalado: pip install -e ".[scripts]"
from handlers.call_gemini import lambda_handler

DEFAULT_PROMPT = "Explique em uma frase o que é uma função serverless."


def run_local(prompt):
    print("🧪 Execução local do proxy Gemini")
    print("-" * 60)

    # 1. Carrega GEMINI_API_KEY do .env (se existir)
    load_dotenv()
    if not os.environ.get("GEMINI_API_KEY") and not os.environ.get("GEMINI_API_KEY_SECRET_ID"):
        print("❌ ERRO: defina GEMINI_API_KEY (ou GEMINI_API_KEY_SECRET_ID) no .env ou no terminal.")
        return 1

    # 2. Evento igual ao que o API Gateway enviaria
    event = {
        "httpMethod": "POST",
        "body": json.dumps({"prompt": prompt})
    }

    print(f"🔄 Enviando prompt: {prompt[:60]}")
    response = lambda_handler(event, None)
    body = json.loads(response["body"])

    # 3. Resultado
    if response["statusCode"] != 200:
        print(f"❌ FALHA: status {response['statusCode']}")
        print(f"   Detalhes: {body.get('error')}")
        return 1

    print("✅ Resposta recebida:")
    try:
        print(body["candidates"][0]["content"]["parts"][0]["text"])
    except (KeyError, IndexError):
        print(json.dumps(body, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    prompt = " ".join(sys.argv[1:]) or DEFAULT_PROMPT
    sys.exit(run_local(prompt))
