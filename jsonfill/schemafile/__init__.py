"""Schema files: a small record definition language for jsonfill descriptors."""

from .build import build_descriptors as build_descriptors
from .parser import ValidationError as ValidationError
from .parser import dependency_order as dependency_order
from .parser import parse as parse
from .parser import validate as validate
from .types import Schema as Schema
from .types import SchemaMember as SchemaMember
from .types import SchemaRecord as SchemaRecord
from .types import SchemaType as SchemaType
