from typing import List, Optional
import httpx

OPENAI_EMBEDDINGS_URL = "https://api.openai.com/v1/embeddings"


class OpenAIEmbedder:
    def __init__(self, api_key: Optional[str], model: str, *, timeout: float = 60,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self._api_key = api_key
        self.model = model
        self._timeout = timeout
        self._transport = transport

    @property
    def configured(self) -> bool:
        return bool(self._api_key)

    async def embed(self, texts: List[str]) -> List[List[float]]:
        if not self._api_key:
            raise RuntimeError("OPENAI_API_KEY is not configured for embeddings")
        headers = {"Authorization": f"Bearer {self._api_key}"}
        payload = {"model": self.model, "input": texts}
        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            r = await client.post(OPENAI_EMBEDDINGS_URL, headers=headers, json=payload)
            r.raise_for_status()
            data = r.json()
        return [item["embedding"] for item in data["data"]]
