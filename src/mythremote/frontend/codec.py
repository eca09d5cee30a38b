"""
Line protocol codec - ASCII line commands and prompt-terminated responses.

Commands are single newline-terminated lines. Responses are zero or more lines
followed by the two character prompt ``"# "``, which marks the end of the
response and is never part of a data line.
"""

import asyncio

from mythremote.core.logging import get_logger, log_protocol_recv
from mythremote.core.utils import CommandEncodingError, FrontendIOError, describe_error

logger = get_logger()

PROMPT = b"# "
LINE_TERMINATOR = "\n"


def encode_command(command: str) -> bytes:
    """
    Encode a command for the wire.

    Exactly one newline is appended when the command does not already end
    with one.

    Args:
        command: Command verb and arguments, e.g. ``"key enter"``.

    Raises:
        CommandEncodingError: If the command contains non-ASCII characters.
    """
    if not command.endswith(LINE_TERMINATOR):
        command += LINE_TERMINATOR

    try:
        return command.encode("ascii")
    except UnicodeEncodeError as e:
        raise CommandEncodingError(f"Command {command.strip()!r} is not ASCII: {e}") from e


def decode_line(data: bytes) -> str:
    """Decode one raw response line, dropping its line ending."""
    return data.decode("ascii", errors="replace").rstrip("\r\n")


async def read_line(reader: asyncio.StreamReader, timeout: float) -> str | None:
    """
    Read a single response line, or None when the prompt is received.

    Args:
        reader: Stream to read from.
        timeout: Maximum time in seconds to wait for each read.

    Raises:
        asyncio.TimeoutError: If the frontend stops sending mid-response.
        asyncio.IncompleteReadError: If the stream reaches EOF.
        OSError: If the socket fails.
    """
    head = await asyncio.wait_for(reader.readexactly(2), timeout)
    if head == PROMPT:
        return None

    # A line shorter than two characters is already complete
    if head.endswith(b"\n"):
        return decode_line(head)

    rest = await asyncio.wait_for(reader.readuntil(b"\n"), timeout)
    return decode_line(head + rest)


async def read_response(
    reader: asyncio.StreamReader,
    timeout: float,
    address: str | None = None,
) -> list[str]:
    """
    Read all response lines up to the prompt.

    A read timeout is not an error: the lines read so far are returned.

    Args:
        reader: Stream to read from.
        timeout: Maximum time in seconds to wait for each read.
        address: Frontend address, used for the protocol log.

    Returns:
        The response lines without line endings. Empty if the frontend sent
        only the prompt or nothing before the timeout.

    Raises:
        FrontendIOError: If the stream fails or reaches EOF. The lines read
            before the failure are attached as ``partial``.
    """
    lines: list[str] = []
    while True:
        try:
            line = await read_line(reader, timeout)
        except asyncio.TimeoutError:
            logger.warning("Socket timeout while waiting for prompt")
            return lines
        except asyncio.IncompleteReadError as e:
            raise FrontendIOError("Connection closed by frontend", partial=lines) from e
        except asyncio.LimitOverrunError as e:
            raise FrontendIOError("Response line too long", partial=lines) from e
        except OSError as e:
            raise FrontendIOError(describe_error(e), partial=lines) from e

        if line is None:
            return lines

        log_protocol_recv(line, address)
        logger.verbose(f"Received line: {line!r}")
        lines.append(line)
