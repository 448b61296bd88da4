"""
Request Test Factory

Builders for generation requests used across service and route tests.
"""

from llm_nexus.llm_gateway.models import GenerationRequest


class RequestTestFactory:
    @staticmethod
    def create(user_id: str | None = None, prompt: str = "What is the capital of France?", **kwargs) -> GenerationRequest:
        return GenerationRequest(user_id=user_id, prompt=prompt, **kwargs)

    @staticmethod
    def anonymous(prompt: str = "What is the capital of France?") -> GenerationRequest:
        return GenerationRequest(prompt=prompt)

    @staticmethod
    def http_body(prompt: str = "What is the capital of France?", **kwargs) -> dict:
        body = {"prompt": prompt}
        body.update(kwargs)
        return body
