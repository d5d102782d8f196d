import logging
import tomllib
from collections import deque
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt, ValidationError

from ._errors import ExpressionError, ModelFileError
from ._expression import Literal, parse_expression, references
from ._variables import Variable, VariableScope

logger = logging.getLogger(__name__)


class BlockSpec(BaseModel):
    """Schema of one block (scope) of a model file."""

    model_config = ConfigDict(extra="forbid")

    name: str = "root"
    inputs: list[str] = Field(default_factory=list)
    variables: dict[str, StrictFloat | StrictInt | str] = Field(default_factory=dict)
    blocks: list["BlockSpec"] = Field(default_factory=list)


def _populate(scope: VariableScope, spec: BlockSpec, constant_ids: set[int]) -> None:
    for name in spec.inputs:
        scope.add_variable(Variable(name=scope.qualify(name)), name)

    for name, value in spec.variables.items():
        if isinstance(value, str):
            expression = parse_expression(value, scope.lookup)
            constant = references(expression) <= constant_ids
        else:
            expression = Literal(value)
            constant = True
        variable = scope.add_variable(Variable(name=scope.qualify(name), expression=expression, constant=constant), name)
        if constant:
            constant_ids.add(variable.id)
        logger.debug(f"Declared {variable.name} ({'constant' if constant else 'variable'})")


def build_scope_tree(spec: BlockSpec) -> VariableScope:
    """Create the scope tree described by a validated model specification.

    Blocks are populated parents first, so expressions may refer to
    variables of enclosing blocks but never to those of nested ones.

    Raises:
        ExpressionError: If an expression is invalid or names an unknown variable.
        KeyError: If a name is declared twice in the same block.

    """
    root = VariableScope(name=spec.name)
    constant_ids: set[int] = set()
    work: deque[tuple[BlockSpec, VariableScope]] = deque([(spec, root)])
    while work:
        block_spec, scope = work.popleft()
        _populate(scope, block_spec, constant_ids)
        work.extend((child_spec, scope.add_child(child_spec.name)) for child_spec in block_spec.blocks)
    return root


def load_scope_tree(path: Path) -> VariableScope:
    """Load a scope tree from a TOML model file.

    Args:
        path: Path to the model file.

    Returns:
        The root scope.

    Raises:
        ModelFileError: If the file cannot be read, is not valid TOML, does
            not match the model schema, or contains an invalid expression.

    """
    try:
        with path.open("rb") as f:
            data = tomllib.load(f)
    except OSError as e:
        msg = f"Cannot read model file {path}: {e}"
        raise ModelFileError(msg) from e
    except tomllib.TOMLDecodeError as e:
        msg = f"Invalid TOML in {path}: {e}"
        raise ModelFileError(msg) from e

    try:
        spec = BlockSpec.model_validate(data)
    except ValidationError as e:
        msg = f"Invalid model file {path}: {e}"
        raise ModelFileError(msg) from e

    try:
        root = build_scope_tree(spec)
    except (ExpressionError, KeyError) as e:
        msg = f"Invalid model file {path}: {e}"
        raise ModelFileError(msg) from e

    logger.debug(f"Loaded model from {path}")
    return root
