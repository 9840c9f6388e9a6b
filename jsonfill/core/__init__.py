"""Schema-driven JSON decoding engine."""

from .accumulator import Accumulator as Accumulator
from .arrays import FixedArray as FixedArray
from .errors import *
from .fields import FieldInfo as FieldInfo
from .fields import describe as describe
from .fields import json_field as json_field
from .parser import ParseOptions as ParseOptions
from .parser import Parser as Parser
from .parser import Target as Target
from .parser import decode as decode
from .parser import parse as parse
from .sizes import FieldLayout as FieldLayout
from .sizes import RecordLayout as RecordLayout
from .sizes import footprint as footprint
from .sizes import record_layout as record_layout
from .types import *
