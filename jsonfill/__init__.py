"""jsonfill - decode JSON straight into described records."""

from importlib.metadata import PackageNotFoundError, version

from .core import BOOL as BOOL
from .core import FLOAT as FLOAT
from .core import INT as INT
from .core import STRING as STRING
from .core import UNKNOWN as UNKNOWN
from .core import BadFormatError as BadFormatError
from .core import BadSpecError as BadSpecError
from .core import ErrorCode as ErrorCode
from .core import FixedArray as FixedArray
from .core import Kind as Kind
from .core import NestingTooDeepError as NestingTooDeepError
from .core import NotSupportedError as NotSupportedError
from .core import ObjectDescriptor as ObjectDescriptor
from .core import OutOfBoundsError as OutOfBoundsError
from .core import ParseError as ParseError
from .core import ParseOptions as ParseOptions
from .core import PropertyDescriptor as PropertyDescriptor
from .core import PropertyNotFoundError as PropertyNotFoundError
from .core import Target as Target
from .core import TypeDescriptor as TypeDescriptor
from .core import array_of as array_of
from .core import decode as decode
from .core import describe as describe
from .core import json_field as json_field
from .core import object_of as object_of
from .core import parse as parse

try:
    __version__ = version("jsonfill")
except PackageNotFoundError:
    __version__ = "(local)"
