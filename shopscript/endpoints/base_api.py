from typing import Any, List, Type, TypeVar

import httpx
from pydantic import BaseModel

from shopscript.core.errors import ErrorKind, ErrorRecord, ShopScriptError
from shopscript.core.logging import get_logger
from shopscript.core.pipeline import RequestPipeline

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class BaseApi:
    """
    Base class for endpoint modules.

    Endpoint modules build requests, hand them to the shared RequestPipeline
    and parse the JSON payloads into pydantic models. They hold no state.
    """

    def __init__(self, pipeline: RequestPipeline):
        self._pipeline = pipeline

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise BaseApi._invalid_response(response, "body is not valid JSON") from e

    @staticmethod
    def _has_body(response: httpx.Response) -> bool:
        return response.status_code != 204 and bool(response.content)

    @classmethod
    def _parse(cls, response: httpx.Response, model: Type[ModelT]) -> ModelT:
        data = cls._json(response)
        try:
            return model.model_validate(data)
        except ValueError as e:
            raise cls._invalid_response(response, f"unexpected {model.__name__} payload") from e

    @classmethod
    def _parse_list(cls, response: httpx.Response, model: Type[ModelT], key: str) -> List[ModelT]:
        """Parse a list payload delivered as `data`, as `key`, or as a bare array."""
        data = cls._json(response)
        if isinstance(data, dict):
            items = data.get("data")
            if items is None:
                items = data.get(key)
        else:
            items = data
        if items is None:
            items = []
        if not isinstance(items, list):
            raise cls._invalid_response(response, f"expected a list of {model.__name__}")

        try:
            return [model.model_validate(item) for item in items]
        except ValueError as e:
            raise cls._invalid_response(response, f"unexpected {model.__name__} payload") from e

    @staticmethod
    def _invalid_response(response: httpx.Response, reason: str) -> ShopScriptError:
        logger.error(f"Invalid response from {response.request.method} {response.request.url}: {reason}")
        return ShopScriptError(
            ErrorRecord(
                kind=ErrorKind.UNKNOWN,
                message=f"Invalid response from server: {reason}",
                http_status=response.status_code,
                code="invalid_response",
            )
        )
