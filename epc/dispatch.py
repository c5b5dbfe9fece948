"""Map input events to semantic commands and apply them to the session.

Key routing has three mutually exclusive tiers chosen by the event's
modifiers: no modifiers, Control (wins over Shift), then Shift. A key is
resolved in exactly one tier; codes a tier does not bind are ignored.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from .errors import classify_error
from .events import InputEvent, InputFailure, KeyEvent, Modifier, Quit, Tick
from .keymap import KeyBinding, KeyTable
from .navigation import Direction
from .session import PROMPT_LIBRARY, Session
from .views import View, ViewKind

logger = logging.getLogger(__name__)


class CommandKind(Enum):
    ADVANCE = "advance"
    RETREAT = "retreat"
    GOTO_LIBRARY = "goto_library"
    GOTO_SETTINGS = "goto_settings"
    MOVE = "move"
    CHAR = "char"
    ACTIVATE = "activate"
    SEARCH_LIBRARY = "search_library"
    FIND_ON_PAGE = "find_on_page"
    QUIT = "quit"


@dataclass(frozen=True)
class Command:
    kind: CommandKind
    direction: Direction | None = None
    char: str = ""


ADVANCE = Command(CommandKind.ADVANCE)
RETREAT = Command(CommandKind.RETREAT)
GOTO_LIBRARY = Command(CommandKind.GOTO_LIBRARY)
GOTO_SETTINGS = Command(CommandKind.GOTO_SETTINGS)
ACTIVATE = Command(CommandKind.ACTIVATE)
SEARCH_LIBRARY = Command(CommandKind.SEARCH_LIBRARY)
FIND_ON_PAGE = Command(CommandKind.FIND_ON_PAGE)
QUIT = Command(CommandKind.QUIT)


def move(direction: Direction) -> Command:
    return Command(CommandKind.MOVE, direction=direction)


def _always(command: Command):
    return lambda _view: command


def _find_for_view(view: View) -> Command | None:
    """Control+F searches the library or the current page, depending on view."""
    if view.kind is ViewKind.LIBRARY:
        return SEARCH_LIBRARY
    if view.kind is ViewKind.DOCUMENT:
        return FIND_ON_PAGE
    return None


def _char_input(code: str, _view: View) -> Command | None:
    if len(code) == 1 and code.isprintable():
        return Command(CommandKind.CHAR, char=code)
    return None


PLAIN_KEYS: KeyTable[Command] = KeyTable(fallback=_char_input).bind(
    KeyBinding(("q",), _always(QUIT)),
    KeyBinding(("j", "DOWN"), _always(move(Direction.DOWN))),
    KeyBinding(("k", "UP"), _always(move(Direction.UP))),
    KeyBinding(("h", "LEFT"), _always(move(Direction.LEFT))),
    KeyBinding(("l", "RIGHT"), _always(move(Direction.RIGHT))),
    KeyBinding(("TAB",), _always(ADVANCE)),
    KeyBinding(("HOME",), _always(GOTO_LIBRARY)),
    KeyBinding(("s",), _always(GOTO_SETTINGS)),
    KeyBinding(("n", "PAGE_DOWN"), _always(ADVANCE)),
    KeyBinding(("p", "PAGE_UP"), _always(RETREAT)),
    KeyBinding(("ENTER",), _always(ACTIVATE)),
)

CONTROL_KEYS: KeyTable[Command] = KeyTable().bind(
    KeyBinding(("c",), _always(QUIT)),
    KeyBinding(("j", "DOWN"), _always(ADVANCE)),
    KeyBinding(("k", "UP"), _always(RETREAT)),
    KeyBinding(("f",), _find_for_view),
)

SHIFT_KEYS: KeyTable[Command] = KeyTable().bind(
    KeyBinding(("j", "DOWN"), _always(ADVANCE)),
    KeyBinding(("k", "UP", "BACKTAB"), _always(RETREAT)),
)


def dispatch_key(event: KeyEvent, view: View) -> Command | None:
    """Resolve a key event to at most one command for the active view."""
    if not event.modifiers:
        return PLAIN_KEYS.resolve(event.code, view)
    if event.has(Modifier.CONTROL):
        return CONTROL_KEYS.resolve(event.code, view)
    if event.has(Modifier.SHIFT):
        return SHIFT_KEYS.resolve(event.code, view)
    return None


def apply_command(session: Session, command: Command) -> bool:
    """Apply ``command`` to the session; returns ``True`` when the app should quit."""
    kind = command.kind
    machine = session.machine
    if kind is CommandKind.QUIT:
        return True
    if kind is CommandKind.ADVANCE:
        machine.advance()
    elif kind is CommandKind.RETREAT:
        machine.retreat()
    elif kind is CommandKind.GOTO_LIBRARY:
        machine.goto_library()
    elif kind is CommandKind.GOTO_SETTINGS:
        machine.goto_settings()
    elif kind is CommandKind.MOVE:
        if command.direction is None or not machine.directional_move(command.direction):
            return False
    elif kind is CommandKind.CHAR:
        if not session.input_char(command.char):
            return False
    elif kind is CommandKind.ACTIVATE:
        if not session.activate_selection():
            return False
    elif kind is CommandKind.SEARCH_LIBRARY:
        session.search_library()
    elif kind is CommandKind.FIND_ON_PAGE:
        session.find_on_page()
    session.dirty = True
    return False


_PROMPT_CURSOR_KEYS = {"UP": Direction.UP, "DOWN": Direction.DOWN}


def handle_prompt_key(session: Session, event: KeyEvent) -> bool:
    """Route a key to the open prompt; returns whether the prompt consumed it.

    The prompt is modal: everything except Control+C is consumed so typed
    letters never trigger navigation. Up and Down still move the library
    cursor through the filtered entries.
    """
    prompt = session.prompt
    if prompt is None:
        return False
    if event.has(Modifier.CONTROL):
        return event.code != "c"
    code = event.code
    if code == "ESC":
        session.cancel_prompt()
    elif code == "ENTER":
        session.accept_prompt()
    elif code == "BACKSPACE":
        session.set_query(prompt.query[:-1])
    elif code in _PROMPT_CURSOR_KEYS:
        if prompt.mode == PROMPT_LIBRARY and session.machine.directional_move(_PROMPT_CURSOR_KEYS[code]):
            session.dirty = True
    elif event.is_char and code.isprintable() and not event.has(Modifier.ALT):
        session.input_char(code.upper() if event.has(Modifier.SHIFT) else code)
    return True


def handle_event(session: Session, event: InputEvent, now: float) -> bool:
    """Process one scheduler event; returns ``True`` when the loop should stop.

    An ``InputFailure`` is re-raised as a classified reader error.
    """
    if isinstance(event, Tick):
        session.tick(now)
        return False
    if isinstance(event, Quit):
        return True
    if isinstance(event, InputFailure):
        error = classify_error(event.error)
        if error is event.error:
            raise error
        raise error from event.error
    if handle_prompt_key(session, event):
        return False
    command = dispatch_key(event, session.view)
    if command is None:
        return False
    logger.debug("%s in %s -> %s", event, session.view, command.kind.value)
    return apply_command(session, command)


__all__ = [
    "Command",
    "CommandKind",
    "CONTROL_KEYS",
    "PLAIN_KEYS",
    "SHIFT_KEYS",
    "apply_command",
    "dispatch_key",
    "handle_event",
    "handle_prompt_key",
]
