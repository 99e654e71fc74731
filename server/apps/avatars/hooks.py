"""Extension points around avatar storage operations.

Observers connect to the signals below and return ``None`` to let the
operation continue, or a ``Veto`` to block it::

    @receiver(avatar_move_file_before)
    def limit_gifs(sender, filedata, **kwargs):
        if filedata['extension'] == 'gif':
            return Veto.because('AVATAR_NO_GIFS', 'GIF avatars are off')
        return None

Receivers run on a worker thread bounded by ``AVATAR_HOOK_TIMEOUT``.
A receiver that raises, or a dispatch that times out, counts as a veto.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass
from typing import Any, Self

from django.dispatch import Signal

from server.apps.avatars.exceptions import Violation

logger = logging.getLogger(__name__)

# Payload: filedata, file, prefix, row
avatar_move_file_before = Signal()

# Payload: prefix, row
avatar_delete_before = Signal()


@dataclass(frozen=True, slots=True)
class Veto:
    """Receiver result that blocks the pending storage operation."""

    errors: tuple[Violation, ...]

    @classmethod
    def because(cls, code: str, message: str = '') -> Self:
        """Veto with a single violation.

        Args:
            code: Violation code.
            message: Human readable reason.

        Returns:
            Veto instance.
        """
        return cls(errors=(Violation(code, message),))


def dispatch(
    signal: Signal,
    sender: Any,
    *,
    timeout: float | None,
    **payload: Any,
) -> list[Violation]:
    """Send a hook signal and collect vetoes.

    Args:
        signal: Hook to fire.
        sender: Sending class.
        timeout: Seconds to wait for all receivers. ``None`` or ``0``
            runs receivers inline without a bound.
        payload: Keyword arguments passed to receivers.

    Returns:
        Violations raised by vetoing receivers, empty to continue.
    """
    if not timeout:
        responses = signal.send_robust(sender, **payload)
        return _collect_vetoes(responses)

    executor = ThreadPoolExecutor(
        max_workers=1,
        thread_name_prefix='avatar-hook',
    )
    try:
        future = executor.submit(signal.send_robust, sender, **payload)
        responses = future.result(timeout=timeout)
    except FutureTimeoutError:
        logger.error('Avatar hook timed out after %.1f seconds', timeout)
        return [Violation(
            'AVATAR_HOOK_TIMEOUT',
            'An extension did not respond in time',
        )]
    finally:
        # Do not wait for a receiver that overran its budget
        executor.shutdown(wait=False)

    return _collect_vetoes(responses)


def _collect_vetoes(
    responses: list[tuple[Any, Any]],
) -> list[Violation]:
    errors: list[Violation] = []
    for hook_receiver, response in responses:
        if isinstance(response, Exception):
            logger.error(
                'Avatar hook %r failed: %s',
                hook_receiver,
                response,
            )
            errors.append(Violation(
                'AVATAR_HOOK_FAILED',
                f'Extension failed: {response}',
            ))
        elif isinstance(response, Veto):
            logger.info(
                'Avatar hook %r vetoed: %s',
                hook_receiver,
                ', '.join(error.code for error in response.errors),
            )
            errors.extend(
                response.errors or (Violation('AVATAR_HOOK_VETOED'),),
            )
    return errors
