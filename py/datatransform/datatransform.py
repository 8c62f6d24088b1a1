# Copyright (c) 2025 The datatransform authors. MIT LICENSE.
#
# Data Transform
# ==============
#
# Declarative transformation of in-memory JSON-like data structures.
# A list of instructions describes where each value of the result comes
# from in the source, and how it is reshaped on the way.
#
# Each instruction is a map:
# - from: source path, None for the whole source, or a multi-source
#   descriptor {'paths': [...], 'combine': fn}.
# - to: result path, or None to merge a map into the result.
# - instructions: nested instructions applied to the extracted value.
# - transform: fn(value, result, source) applied after nested instructions.
# - default: value used when the source path does not exist.
#
# Main utilities
# - transform: transform a source map (or list of maps) using instructions.
# - transformer: bind instructions into a reusable transform function.


from typing import Any, Callable, Dict, List, Optional
import logging

from .deepprop import (
    UNDEF,
    PathError,
    extract,
    getprop,
    isfunc,
    islist,
    ismap,
    pathify,
    setpath,
)


logger = logging.getLogger(__name__)

S_from = 'from'
S_to = 'to'
S_instructions = 'instructions'
S_transform = 'transform'
S_default = 'default'
S_paths = 'paths'
S_combine = 'combine'
S_warn = 'warn'


class DataTransformError(Exception):
    """Base error for transformations, carrying the offending instruction."""

    def __init__(self, message: str, instruction: Any = UNDEF) -> None:
        super().__init__(message)
        self.message = message
        self.instruction = instruction


class InvalidSourceError(DataTransformError):
    """The source is neither a map nor a list."""


class InstructionError(DataTransformError):
    """An instruction is malformed, or its paths cannot be resolved."""


class MergeError(InstructionError):
    """A non-map value cannot be merged into the result."""


class Instruction:
    """
    A validated transformation instruction.
    """
    def __init__(
        self,
        source: Any,                        # Source path, None (root), or multi-source map.
        target: Any,                        # Result path, or None to merge into the result.
        instructions: Any = None,           # Nested instruction(s), maps or Instructions.
        transform: Optional[Callable] = None,  # fn(value, result, source) -> value.
        default: Any = UNDEF,               # Value used when the source does not exist.
        hasdefault: bool = False,           # Default was given (it may be None).
        spec: Any = UNDEF,                  # Instruction as supplied by the caller.
    ) -> None:
        self.source = source
        self.target = target
        self.instructions = None if instructions is None else parseall(instructions)
        self.transform = transform
        self.default = default
        self.hasdefault = hasdefault
        self.spec = self if spec is UNDEF else spec

    @property
    def multisource(self) -> bool:
        return ismap(self.source) and S_paths in self.source

    @classmethod
    def parse(cls, spec: Any) -> 'Instruction':
        "Validate an instruction map and build an Instruction."
        if isinstance(spec, Instruction):
            return spec

        if not ismap(spec):
            raise InstructionError(
                f'invalid instruction: expected a map, found {type(spec).__name__}', spec)

        if S_from not in spec:
            raise InstructionError(
                'missing from: instruction must supply a "from" path (None for the whole source)',
                spec)

        if S_to not in spec:
            raise InstructionError(
                'missing to: instruction must supply a "to" path (None to merge into the result)',
                spec)

        transform = spec.get(S_transform)
        if transform is not None and not isfunc(transform):
            raise InstructionError('transform is not callable', spec)

        source = spec[S_from]
        if ismap(source) and S_paths in source:
            if not isinstance(source[S_paths], (list, tuple)):
                raise InstructionError('paths is not a list', spec)
            combine = source.get(S_combine)
            if combine is not None and not isfunc(combine):
                raise InstructionError('combine is not callable', spec)

        nested = spec.get(S_instructions)

        return cls(
            source=source,
            target=spec[S_to],
            instructions=nested,
            transform=transform,
            default=spec.get(S_default),
            hasdefault=S_default in spec,
            spec=spec,
        )


def parseall(instructions: Any) -> List[Instruction]:
    "Parse a single instruction, or a list of them."
    if not islist(instructions):
        instructions = [instructions]
    return [Instruction.parse(ins) for ins in instructions]


def extractsource(source: Any, path: Any):
    "Extract a single path, where None is the source itself."
    if path is UNDEF:
        return True, source
    return extract(source, path)


def extractcombined(source: Any, descriptor: Dict[str, Any]):
    """
    Extract each of the descriptor's paths, in order. Every path is
    extracted, so a malformed path fails even after a missing one.
    The values exist only if all of the paths exist.
    """
    extracts = [extractsource(source, path) for path in descriptor[S_paths]]

    if not all(exists for exists, _ in extracts):
        return False, UNDEF

    return True, [val for _, val in extracts]


def transform(
        source: Any,
        instructions: Any,
        config: Optional[Dict[str, Any]] = None,
) -> Any:
    """
    Transform a source map into a new map using instructions.
    A list source is transformed element by element.
    The source is not modified.
    """
    checksource(source)

    warn = bool(getprop(config, S_warn, False))
    parsed = parseall(instructions)

    if islist(source):
        return [_transform(elem, parsed, warn, elem) for elem in source]

    return _transform(source, parsed, warn, source)


def checksource(source: Any) -> None:
    if not ismap(source) and not islist(source):
        raise InvalidSourceError(
            f'Source must be an object or an array, found: {type(source).__name__}')


def _transform(source, instructions, warn, top):
    if islist(source):
        return [_transform(elem, instructions, warn, top) for elem in source]

    checksource(source)

    result = {}

    for ins in instructions:
        try:
            if ins.multisource:
                exists, val = extractcombined(source, ins.source)
            else:
                exists, val = extractsource(source, ins.source)
        except PathError as err:
            raise InstructionError(f'in from: {err}', ins.spec) from err

        if exists:
            combine = ins.source.get(S_combine) if ins.multisource else None
            if combine is not None:
                val = combine(*val)
            if ins.instructions is not None:
                val = _transform(val, ins.instructions, warn, top)
            if ins.transform is not None:
                val = ins.transform(val, result, top)

        else:
            if warn:
                logger.warning('Value does not exist at: %s', pathify(ins.source))
            val = ins.default if ins.hasdefault else UNDEF

        if ins.target is UNDEF:
            if not ismap(val):
                raise MergeError('cannot assign properties from a non-object', ins.spec)
            result.update(val)
        else:
            try:
                setpath(result, ins.target, val)
            except PathError as err:
                raise InstructionError(f'in to: {err}', ins.spec) from err

    return result


def transformer(instructions: Any) -> Callable[..., Any]:
    "Bind instructions into a reusable transform function."

    def transformfn(source: Any, config: Optional[Dict[str, Any]] = None) -> Any:
        return transform(source, instructions, config)

    return transformfn


__all__ = [
    'DataTransformError',
    'Instruction',
    'InstructionError',
    'InvalidSourceError',
    'MergeError',
    'parseall',
    'transform',
    'transformer',
]
