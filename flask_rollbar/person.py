"""
Person enrichment for outgoing reports.

The person map is built per log call, lowest priority first:

1. session snapshot and session id,
2. the configured ``person_fn``,
3. an explicit ``person`` mapping passed in the record's context.

Each layer is shallow-merged over the previous one.
"""

from typing import Any, Callable, Dict, Mapping, Optional, Protocol

from flask import has_request_context, session as flask_session

PersonFn = Callable[[], Optional[Mapping[str, Any]]]


class SessionSource(Protocol):
    """Anything that can hand over the current session's data and id."""

    def all(self) -> Mapping[str, Any]: ...

    def get_id(self) -> Optional[str]: ...


class FlaskSessionSource:
    """``SessionSource`` over ``flask.session``.

    Outside a request context the session is empty.  The id comes from a
    server-side session's ``sid`` (Flask-Session) or the ``_id`` key
    Flask-Login keeps in the cookie session; plain cookie sessions have none.
    """

    def all(self) -> Mapping[str, Any]:
        if not has_request_context():
            return {}
        return dict(flask_session)

    def get_id(self) -> Optional[str]:
        if not has_request_context():
            return None
        sid = getattr(flask_session, "sid", None)
        if sid:
            return sid
        return flask_session.get("_id")


def build_person(
    session: Optional[SessionSource] = None,
    person_fn: Optional[PersonFn] = None,
    explicit: Any = None,
) -> Dict[str, Any]:
    """Merge every person source into one dict (see module docstring)."""
    person: Dict[str, Any] = {}

    if session is not None:
        data = session.all()
        if data:
            person["session"] = dict(data)
            session_id = session.get_id()
            if session_id is not None:
                person["id"] = session_id

    if person_fn is not None:
        extra = person_fn()
        if extra:
            person.update(extra)

    if isinstance(explicit, Mapping):
        person.update(explicit)

    return person


def merge_context(
    context: Optional[Mapping[str, Any]],
    session: Optional[SessionSource] = None,
    person_fn: Optional[PersonFn] = None,
) -> Dict[str, Any]:
    """Return a new context with ``person`` consumed and replaced by the merged map.

    Everything else in *context* (``tags`` and the like) is passed through.
    ``person`` is only present in the result when it is non-empty.
    """
    merged = dict(context or {})
    person = build_person(session, person_fn, merged.pop("person", None))
    if person:
        merged["person"] = person
    return merged
