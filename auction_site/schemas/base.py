from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from auction_site.core.errors import InvalidArgumentError

ModelT = TypeVar("ModelT", bound=BaseModel)


def parse_input(schema: type[ModelT], **data: Any) -> ModelT:
    """Validate caller input, reporting failures as InvalidArgumentError"""
    try:
        return schema(**data)
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in exc.errors()
        )
        raise InvalidArgumentError(problems) from exc
