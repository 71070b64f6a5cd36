"""Base protocol for pipeline handlers."""

from typing import Protocol, TypeVar

from dotcode_scanner.core.exceptions import DotCodeScannerError
from dotcode_scanner.core.types import Result

# Contravariant input (handlers can accept supertypes), invariant output
T_In = TypeVar("T_In", contravariant=True)
T_Out = TypeVar("T_Out")
T_Error = TypeVar("T_Error", bound=DotCodeScannerError)


class BaseAsyncHandler(Protocol[T_In, T_Out, T_Error]):
    """Protocol for asynchronous pipeline handlers.

    Each handler performs a single transformation and reports the outcome as
    data, making it easy to test and reason about.
    """

    async def handle(self, command: T_In) -> Result[T_Out, T_Error]:
        """Process one input.

        Args:
            command: The input for this stage.

        Returns:
            A Result object containing either the output or an error.
        """
        ...
