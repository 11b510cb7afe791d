"""OpenAI Chat Completions client for nutrition analysis."""

from dataclasses import dataclass

from openai import AsyncOpenAI

from simple_calorie.services.analysis import AnalysisClient


@dataclass
class OpenAIAnalysisClient(AnalysisClient):
    """Analysis client backed by OpenAI Chat Completions."""

    client: AsyncOpenAI

    @classmethod
    def create(cls, api_key: str) -> "OpenAIAnalysisClient":
        """Create an OpenAI analysis client."""
        return cls(client=AsyncOpenAI(api_key=api_key))

    async def complete(  # noqa: PLR0913
        self,
        *,
        model: str,
        prompt: str,
        image_data_urls: list[str],
        temperature: float,
        max_tokens: int,
    ) -> str:
        """Send images and the prompt in one user message."""
        content: list[dict[str, object]] = [
            {"type": "image_url", "image_url": {"url": url}}
            for url in image_data_urls
        ]
        content.append({"type": "text", "text": prompt})
        response = await self.client.chat.completions.create(
            model=model,
            temperature=temperature,
            max_tokens=max_tokens,
            messages=[{"role": "user", "content": content}],
        )
        output_text = response.choices[0].message.content
        if not output_text:
            raise RuntimeError("OpenAI returned an empty response")
        return output_text
