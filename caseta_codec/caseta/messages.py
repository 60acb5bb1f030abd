import re
from dataclasses import dataclass
from typing import Union

from caseta_codec.caseta.types import (
    COMMAND_PROMPT,
    DEVICE_EVENT_PREFIX,
    LOGIN_PROMPT,
    PASSWORD_PROMPT,
    REMOTE_ID_MAX,
    REMOTE_ID_MIN,
    ButtonAction,
    ButtonId,
    DecodeError,
    RemoteId,
)

RE_DEVICE_EVENT = re.compile(
    rf"^{re.escape(DEVICE_EVENT_PREFIX)},([0-9]{1,3}),([0-9]{1,3}),([0-9]{1,3})$"
)


@dataclass(frozen=True)
class LoginPrompt:
    def __str__(self):
        return "LoginPrompt"


@dataclass(frozen=True)
class PasswordPrompt:
    def __str__(self):
        return "PasswordPrompt"


@dataclass(frozen=True)
class LoggedIn:
    def __str__(self):
        return "LoggedIn"


@dataclass(frozen=True)
class ButtonEvent:
    remote_id: RemoteId
    button_id: ButtonId
    action: ButtonAction

    def __str__(self):
        return f"remote {self.remote_id} {self.button_id.name} {self.action.name}"


@dataclass(frozen=True)
class UnrecognizedMessage:
    raw: str

    def __str__(self):
        return f"unrecognized {self.raw!r}"


Message = Union[LoginPrompt, PasswordPrompt, LoggedIn, ButtonEvent, UnrecognizedMessage]

_PROMPTS = {
    LOGIN_PROMPT.strip(): LoginPrompt,
    PASSWORD_PROMPT.strip(): PasswordPrompt,
    COMMAND_PROMPT.strip(): LoggedIn,
}


def decode_button_id(code: int) -> ButtonId:
    try:
        return ButtonId(code)
    except ValueError:
        raise DecodeError(f"{code} is not a valid button id") from None


def decode_button_action(code: int) -> ButtonAction:
    try:
        return ButtonAction(code)
    except ValueError:
        raise DecodeError(f"{code} is not a valid button action") from None


def decode_remote_id(value: int) -> RemoteId:
    if not REMOTE_ID_MIN <= value <= REMOTE_ID_MAX:
        raise DecodeError(f"{value} is not a valid remote id")
    return value


def decode_message(text: str) -> Message:
    """
    Decode one frame of text received from the bridge.

    Args:
        text: The frame, with or without its line terminator

    Returns:
        The typed message

    Raises:
        DecodeError: If the text is not a message the bridge is known to send,
            or a device event carries an unknown component or action code
    """
    line = text.strip()

    prompt = _PROMPTS.get(line)
    if prompt is not None:
        return prompt()

    match = RE_DEVICE_EVENT.match(line)
    if match is None:
        raise DecodeError("message not understood", raw=text)

    remote, component, action = (int(group) for group in match.groups())
    try:
        return ButtonEvent(
            remote_id=decode_remote_id(remote),
            button_id=decode_button_id(component),
            action=decode_button_action(action),
        )
    except DecodeError as e:
        raise DecodeError(str(e), raw=text) from None


def decode_frame(frame: bytes) -> Message:
    """Decode a raw frame, rejecting bytes that aren't valid UTF-8."""
    try:
        text = frame.decode("utf-8")
    except UnicodeDecodeError as e:
        raise DecodeError(f"frame is not valid UTF-8 ({e.reason})", raw=frame) from None
    return decode_message(text)
