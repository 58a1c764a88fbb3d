"""Shared request handling for IPC controllers.

A controller opens one session per request, calls one service method, and
turns the service result into the uniform envelope. The session commits
only when the result is a success.
"""

import logging
from typing import Any, Callable

from pydantic import BaseModel
from pydantic import ValidationError as PayloadValidationError
from sqlalchemy.orm import Session

from schooldesk.db import SessionFactory, SessionLocal
from schooldesk.schemas.envelope import ApiResponse, api_error, api_success
from schooldesk.services.result import Failure, ServiceResult

logger = logging.getLogger(__name__)


def describe_payload_error(error: PayloadValidationError) -> str:
    """Flatten pydantic errors into one line: "field: message; ..."."""
    parts = []
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"]) or "payload"
        parts.append(f"{location}: {item['msg']}")
    return "; ".join(parts)


class BaseController:
    """CRUD request handling for one entity.

    Subclasses set the service, payload and record schemas and the entity
    names used in messages.
    """

    entity = "Record"
    """Display name, capitalized (e.g. "Class")"""

    noun = "record"
    """Name used inside messages (e.g. "class")"""

    service_class: type = None
    create_schema: type[BaseModel] = None
    update_schema: type[BaseModel] = None
    record_schema: type[BaseModel] = None
    list_schema: type[BaseModel] | None = None

    def __init__(self, session_factory: SessionFactory | None = None):
        self.session_factory = session_factory or SessionLocal

    def _dump(self, schema: type[BaseModel], value: Any) -> dict:
        return schema.model_validate(value).model_dump(by_alias=True)

    def _record(self, value: Any) -> dict:
        return self._dump(self.record_schema, value)

    def _records(self, values: list) -> list[dict]:
        schema = self.list_schema or self.record_schema
        return [self._dump(schema, value) for value in values]

    def _parse(self, schema: type[BaseModel], data: Any) -> BaseModel:
        if isinstance(data, schema):
            return data
        return schema.model_validate(data or {})

    def run(
        self,
        operation: str,
        call: Callable[[Session], ServiceResult],
        success_message: str,
        to_data: Callable[[Any], Any] | None = None,
        falsy_message: str | None = None,
    ) -> ApiResponse:
        """Run one service call in its own transaction and build the envelope.

        Args:
            operation: Action for error messages, e.g. "creating class"
            call: Receives the session and returns a service result
            success_message: Message for the success envelope
            to_data: Converts the result value into envelope data
            falsy_message: If set, a falsy result value is reported as this error

        Returns:
            SuccessResponse or ErrorResponse; never raises
        """
        session = self.session_factory()
        try:
            result = call(session)
            if isinstance(result, Failure):
                session.rollback()
                logger.warning("%s failed: %s", operation, result.message)
                return api_error(result.message)

            value = result.value
            if falsy_message is not None and not value:
                session.rollback()
                return api_error(falsy_message)

            data = to_data(value) if to_data else value
            session.commit()
            return api_success(data, success_message)
        except PayloadValidationError as e:
            session.rollback()
            return api_error(f"Error while {operation}: {describe_payload_error(e)}")
        except Exception as e:
            session.rollback()
            logger.exception("Unhandled error while %s", operation)
            return api_error(f"Error while {operation}: {e}")
        finally:
            session.close()

    def create(self, data: Any) -> ApiResponse:
        operation = f"creating {self.noun}"
        return self.run(
            operation,
            lambda session: self.service_class(session).create(
                self._parse(self.create_schema, data)
            ),
            f"{self.entity} created successfully",
        )

    def update(self, record_id: int, data: Any) -> ApiResponse:
        operation = f"updating {self.noun}"
        return self.run(
            operation,
            lambda session: self.service_class(session).update(
                record_id, self._parse(self.update_schema, data)
            ),
            f"{self.entity} updated successfully",
            falsy_message=f"{self.entity} not found or no changes made",
        )

    def delete(self, ids: int | list[int]) -> ApiResponse:
        operation = f"deleting {self.noun}"
        return self.run(
            operation,
            lambda session: self.service_class(session).delete(ids),
            f"{self.entity} deleted successfully",
            falsy_message=f"{self.entity} not found or no changes made",
        )

    def list(self, record_id: int | None = None) -> ApiResponse:
        operation = f"fetching {self.noun}"
        return self.run(
            operation,
            lambda session: self.service_class(session).list(record_id),
            f"{self.entity} fetched successfully",
            to_data=self._records,
        )

    def fetch(self, record_id: int) -> ApiResponse:
        operation = f"fetching {self.noun}"
        return self.run(
            operation,
            lambda session: self.service_class(session).get(record_id),
            f"{self.entity} fetched successfully",
            to_data=self._record,
        )

    def routes(self) -> dict[str, Callable[..., ApiResponse]]:
        """Channel suffix to handler mapping registered on the IPC router."""
        return {
            "create": self.create,
            "update": self.update,
            "delete": self.delete,
            "list": self.list,
            "fetch": self.fetch,
        }
