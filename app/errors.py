from __future__ import annotations


class ConversionError(Exception):
    """Base for every failure of a scene -> PDF -> store conversion.

    ``kind`` is the stable name surfaced to callers; ``message`` is the
    human readable part. Internal detail stays in the logs.
    """

    kind = "ConversionError"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, str]:
        return {"error": self.kind, "message": self.message}


class FetchError(ConversionError):
    kind = "FetchError"

    def __init__(self, message: str, *, urls: list[str] | None = None) -> None:
        super().__init__(message)
        self.urls = list(urls or [])

    @classmethod
    def aggregate(cls, failures: list[tuple[int, "FetchError"]]) -> "FetchError":
        if len(failures) == 1:
            index, err = failures[0]
            return cls(f"objects[{index}]: {err.message}", urls=err.urls)
        parts = [f"objects[{index}]: {err.message}" for index, err in failures]
        urls = [u for _index, err in failures for u in err.urls]
        return cls(f"{len(failures)} image fetches failed; " + "; ".join(parts), urls=urls)


class RenderError(ConversionError):
    kind = "RenderError"


class StoreError(ConversionError):
    kind = "StoreError"


class UnrecognizedObjectType(ConversionError):
    # Recovered locally: the object is skipped and rendering continues.
    kind = "UnrecognizedObjectType"

    def __init__(self, object_type: str, *, index: int | None = None) -> None:
        where = f"objects[{index}]" if index is not None else "object"
        super().__init__(f"{where}: unsupported object type {object_type!r}")
        self.object_type = object_type
        self.index = index


def summarize_validation_errors(errors: list[dict]) -> str:
    """Flatten pydantic/FastAPI error dicts to ``loc: msg; loc: msg``."""
    parts = []
    for e in errors:
        loc = ".".join(str(p) for p in e.get("loc", ()))
        parts.append(f"{loc}: {e.get('msg')}" if loc else str(e.get("msg")))
    return "; ".join(parts)
