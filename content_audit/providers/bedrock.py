"""AWS Bedrock chat backend using the Converse API."""

import asyncio

from content_audit.errors import ChatBackendError
from content_audit.providers.base import ChatBackend, ModelRef


class BedrockChatBackend(ChatBackend):
    """Sends prompts to AWS Bedrock via the Converse API."""

    provider_id = "bedrock"

    def __init__(self, model_id: str, region: str = "us-east-1", temperature: float = 0.2):
        self._model_id = model_id
        self._region = region
        self._temperature = temperature
        self._client = None

    def _get_client(self):
        """Lazy-init boto3 client (avoids import when not needed)."""
        if self._client is None:
            import boto3

            self._client = boto3.client("bedrock-runtime", region_name=self._region)
        return self._client

    def has_available_provider(self) -> bool:
        # Credentials come from the IAM environment; the model id is the only setting
        return bool(self._model_id)

    def default_model(self) -> ModelRef | None:
        if not self._model_id:
            return None
        return ModelRef(provider_id=self.provider_id, model_id=self._model_id)

    @staticmethod
    def _build_request(prompt: str, model_id: str, temperature: float) -> dict:
        return {
            "modelId": model_id,
            "messages": [{"role": "user", "content": [{"text": prompt}]}],
            "inferenceConfig": {"temperature": temperature},
        }

    @staticmethod
    def _extract_text(response: dict) -> str:
        output_msg = response.get("output", {}).get("message", {})
        return "".join(block.get("text", "") for block in output_msg.get("content", []))

    def _call_converse(self, **kwargs) -> dict:
        """Synchronous Converse API call (run via asyncio.to_thread)."""
        return self._get_client().converse(**kwargs)

    @staticmethod
    def _map_error(e: Exception) -> ChatBackendError:
        if isinstance(getattr(e, "response", None), dict):
            error_code = e.response.get("Error", {}).get("Code", "")
        else:
            error_code = type(e).__name__

        if error_code == "ThrottlingException":
            return ChatBackendError("Bedrock rate limit exceeded")
        if error_code == "ValidationException":
            return ChatBackendError(f"Bedrock validation error: {e}")
        if error_code == "ModelNotReadyException":
            return ChatBackendError("Bedrock model not ready")
        if error_code == "AccessDeniedException":
            return ChatBackendError("Bedrock access denied -- check IAM permissions")
        return ChatBackendError(f"Bedrock error: {e}")

    async def chat(self, prompt: str, model_id: str) -> str:
        kwargs = self._build_request(prompt, model_id, self._temperature)
        try:
            response = await asyncio.to_thread(self._call_converse, **kwargs)
        except Exception as e:
            raise self._map_error(e) from e
        return self._extract_text(response)

    async def close(self) -> None:
        # boto3 clients don't need explicit cleanup
        self._client = None
