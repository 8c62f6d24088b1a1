# Copyright (c) 2025 The datatransform authors. MIT LICENSE.
#
# Deep Property
# =============
#
# Get and set values deep inside in-memory JSON-like data structures.
#
# A path is one of:
# - None: the container itself (root).
# - A dot path string: 'address.country.code'.
# - A list (or tuple) of string and integer segments: ['items', 0, 'sku'].
#
# Utilities
# - parsepath: normalise a path into a list of segments.
# - extract: get the value at a path, as an (exists, value) pair.
# - setpath: set the value at a path, creating intermediate maps.
# - pathify: human-friendly string version of a path.


from typing import Any, List, Optional, Tuple
import re


# The standard undefined value for this language.
UNDEF = None

R_INDEX = re.compile(r'^\d+$')  # List index given as a string.

S_MT = ''
S_DT = '.'
S_ROOT = '<root>'
S_PATHSEP = ' => '


class PathError(ValueError):
    """A path contains illegal segments."""

    def __init__(self, message: str, path: Any = UNDEF) -> None:
        super().__init__(message)
        self.path = path


def ismap(val: Any = UNDEF) -> bool:
    "Value is a defined map (hash)."
    return isinstance(val, dict)


def islist(val: Any = UNDEF) -> bool:
    "Value is a defined list (array)."
    return isinstance(val, list)


def isnode(val: Any = UNDEF) -> bool:
    "Value is a node - a map or a list."
    return isinstance(val, (dict, list))


def isfunc(val: Any = UNDEF) -> bool:
    "Value is a function."
    return callable(val)


def iskey(key: Any = UNDEF) -> bool:
    "Value is a non-empty string or an integer key."
    if isinstance(key, str):
        return len(key) > 0
    # Exclude bool (which is a subclass of int)
    if isinstance(key, bool):
        return False
    return isinstance(key, int)


def getprop(val: Any = UNDEF, key: Any = UNDEF, alt: Any = UNDEF) -> Any:
    """
    Safely get a property of a map. Undefined arguments return undefined.
    If the key is not found, return the alternative value.
    """
    if not ismap(val) or UNDEF == key:
        return alt
    return val.get(key, alt)


def listindex(key: Any) -> Optional[int]:
    "List index for a key, or None if the key cannot index a list."
    if isinstance(key, bool):
        return None
    if isinstance(key, int):
        return key if 0 <= key else None
    if isinstance(key, str) and R_INDEX.match(key):
        return int(key)
    return None


def altkey(key: Any) -> Any:
    "Alternate form of a map key: int for a digit string, string for an int."
    if isinstance(key, bool):
        return UNDEF
    if isinstance(key, int):
        return str(key)
    if isinstance(key, str) and R_INDEX.match(key):
        return int(key)
    return UNDEF


def getelem(node: Any, key: Any) -> Tuple[bool, Any]:
    """
    Get a child of a node by key. Maps are indexed by key, falling back
    to the string form of an integer key, or the integer form of a digit
    string. Lists are indexed by integer, or by a string that parses to a
    non-negative integer.
    """
    if ismap(node):
        if key in node:
            return True, node[key]
        alt = altkey(key)
        if alt is not UNDEF and alt in node:
            return True, node[alt]
        return False, UNDEF

    if islist(node):
        index = listindex(key)
        if index is not None and index < len(node):
            return True, node[index]

    return False, UNDEF


def parsepath(path: Any) -> Optional[List[Any]]:
    """
    Normalise a path into a new list of segments.
    The root path (None) normalises to None.
    """
    if path is UNDEF:
        return UNDEF

    if isinstance(path, str):
        parts = path.split(S_DT)
    elif isinstance(path, (list, tuple)):
        parts = list(path)
    elif iskey(path):
        parts = [path]
    else:
        raise PathError(f'Invalid path type: {type(path).__name__}', path)

    if 0 == len(parts):
        raise PathError('Path is empty', path)

    for part in parts:
        if S_MT == part:
            raise PathError(f'Path contains an empty segment: {path!r}', path)
        if not iskey(part):
            raise PathError(
                f'Path segment must be a string or an integer, found: {part!r}', path)

    return parts


def extract(container: Any, path: Any) -> Tuple[bool, Any]:
    """
    Get the value at a path. Returns (True, value) if the full path resolves,
    even when the value itself is None, and (False, None) otherwise.
    """
    parts = parsepath(path)
    if parts is UNDEF:
        raise PathError('Root path cannot be extracted', path)

    val = container
    for part in parts:
        exists, val = getelem(val, part)
        if not exists:
            return False, UNDEF

    return True, val


def setprop(parent: Any, key: Any, val: Any) -> Any:
    """
    Set a property on a map or list. None is stored, not deleted.
    For lists, a key past the end pads with None before appending.
    """
    if ismap(parent):
        parent[key] = val

    elif islist(parent):
        index = listindex(key)
        if index is None:
            raise PathError(f'Cannot set key {key!r} on a list', key)
        if index < len(parent):
            parent[index] = val
        else:
            parent.extend([UNDEF] * (index - len(parent)))
            parent.append(val)

    return parent


def setpath(container: Any, path: Any, val: Any) -> Any:
    """
    Set the value at a path, creating intermediate maps as needed.
    Intermediate nodes are copied, not modified in place, so data shared
    with another structure is left untouched. Returns the container.
    """
    parts = parsepath(path)
    if parts is UNDEF:
        raise PathError('Root path cannot be set', path)

    if not isnode(container):
        raise PathError(f'Cannot set a path on a {type(container).__name__}', path)

    node = container
    for part in parts[:-1]:
        exists, child = getelem(node, part)
        if exists and isnode(child):
            child = dict(child) if ismap(child) else list(child)
        else:
            child = {}
        setprop(node, _nodekey(node, part), child)
        node = child

    setprop(node, _nodekey(node, parts[-1]), val)
    return container


def _nodekey(node, key):
    # Keep writing to an existing key stored in the other form.
    if ismap(node) and key not in node:
        alt = altkey(key)
        if alt is not UNDEF and alt in node:
            return alt
    return key


def pathify(path: Any = UNDEF) -> str:
    """
    Human-friendly string version of a path, for messages.
    Multi-source descriptors render each sub path in brackets.
    """
    if path is UNDEF:
        return S_ROOT

    if ismap(path) and 'paths' in path:
        paths = path['paths']
        if isinstance(paths, (list, tuple)):
            return ','.join(f'[{pathify(p)}]' for p in paths)
        return f'<unknown-path:{paths!r}>'

    if isinstance(path, str):
        return pathify(path.split(S_DT))

    if isinstance(path, (list, tuple)):
        return S_PATHSEP.join(S_MT + str(p) for p in path)

    if iskey(path):
        return str(path)

    return f'<unknown-path:{path!r}>'


__all__ = [
    'PathError',
    'UNDEF',
    'extract',
    'getelem',
    'getprop',
    'isfunc',
    'iskey',
    'islist',
    'ismap',
    'isnode',
    'parsepath',
    'pathify',
    'setpath',
    'setprop',
]
