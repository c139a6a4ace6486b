"""OpenAI Responses API client for text generation."""

from dataclasses import dataclass

from openai import AsyncOpenAI

from smart_fridge.services.recipes import TextGenerator


@dataclass
class OpenAITextGenerator(TextGenerator):
    """Text generator backed by the OpenAI Responses API."""

    client: AsyncOpenAI
    model: str

    @classmethod
    def create(cls, api_key: str, model: str) -> "OpenAITextGenerator":
        """Create an OpenAI text generator."""
        return cls(client=AsyncOpenAI(api_key=api_key), model=model)

    async def generate(self, prompt: str) -> str:
        """Return the model's text answer for a prompt."""
        response = await self.client.responses.create(
            model=self.model,
            input=prompt,
            store=False,
        )
        return response.output_text or ""

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self.client.close()
