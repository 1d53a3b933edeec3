import boto3
import json
import sys

# --- CONFIGURAÇÃO ---
# Nome da função criada no deploy
FUNCTION_NAME = "gemini-proxy-call-gemini-dev"
REGION = "us-east-1"


def run_test(prompt):
    print(f"🚀 Invocando a função: {FUNCTION_NAME}...")

    lambda_client = boto3.client("lambda", region_name=REGION)

    # Payload simulando o API Gateway
    payload = {
        "httpMethod": "POST",
        "body": json.dumps({"prompt": prompt})
    }

    try:
        response = lambda_client.invoke(
            FunctionName=FUNCTION_NAME,
            InvocationType='RequestResponse',
            Payload=json.dumps(payload)
        )
        response_payload = json.loads(response['Payload'].read())

        # A Lambda rodou mas estourou exceção não tratada
        if "errorMessage" in response_payload:
            print(f"❌ Erro na execução da Lambda: {response_payload['errorMessage']}")
            return

        status_code = response_payload.get("statusCode")
        body = json.loads(response_payload.get("body", "{}"))

        if status_code == 200:
            print("\n✅ SUCESSO! O Gemini respondeu.")
            candidates = body.get("candidates", [])
            print(f"   -> Candidatos: {len(candidates)}")
        else:
            print(f"\n⚠️ Falha: Status Code {status_code}")
            print(f"   Detalhes: {body}")

    except lambda_client.exceptions.ResourceNotFoundException:
        print(f"\n❌ Erro: Não encontrei a função '{FUNCTION_NAME}'.")
    except Exception as e:
        print(f"\n❌ Erro inesperado: {str(e)}")


if __name__ == "__main__":
    run_test(" ".join(sys.argv[1:]) or "Diga olá em três idiomas.")
