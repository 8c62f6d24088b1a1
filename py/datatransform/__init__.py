# datatransform init

from .deepprop import (
    UNDEF,
    PathError,
    extract,
    parsepath,
    pathify,
    setpath,
)

from .datatransform import (
    DataTransformError,
    Instruction,
    InstructionError,
    InvalidSourceError,
    MergeError,
    transform,
    transformer,
)


__all__ = [
    'DataTransformError',
    'Instruction',
    'InstructionError',
    'InvalidSourceError',
    'MergeError',
    'PathError',
    'UNDEF',
    'extract',
    'parsepath',
    'pathify',
    'setpath',
    'transform',
    'transformer',
]
