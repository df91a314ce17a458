"""
tests/conftest.py
Shared fixtures for the zodgen test suite.

No external mocking libraries are used; real file I/O is performed
inside temporary directories managed by pytest's tmp_path fixtures.
"""

from __future__ import annotations

import copy
import logging
import pathlib
import textwrap
from typing import Any, Dict, Iterator, List, Optional

import pytest
import yaml

from zodgen.models import DataModel, FieldDescriptor, GeneratorConfig, ModelDescriptor


# ---------------------------------------------------------------------------
# Path helpers
# ---------------------------------------------------------------------------

ROOT_DIR: pathlib.Path = pathlib.Path(__file__).resolve().parent.parent
DATAMODEL_EXAMPLE_PATH: pathlib.Path = ROOT_DIR / "datamodel_example.yaml"
SCHEMA_EXAMPLE_PATH: pathlib.Path = ROOT_DIR / "schema_example.prisma"


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------


def make_field(
    name: str,
    type_: str,
    kind: str = "scalar",
    *,
    required: bool = True,
    is_list: bool = False,
    default: Any = None,
    documentation: Optional[str] = None,
) -> FieldDescriptor:
    """Build a FieldDescriptor from the host's (camelCase) spelling."""
    return FieldDescriptor.model_validate(
        {
            "name": name,
            "type": type_,
            "kind": kind,
            "isRequired": required,
            "isList": is_list,
            "default": default,
            "documentation": documentation,
        }
    )


def make_model(
    name: str, fields: List[FieldDescriptor], documentation: Optional[str] = None
) -> ModelDescriptor:
    return ModelDescriptor(name=name, fields=fields, documentation=documentation)


# ---------------------------------------------------------------------------
# Raw input fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def raw_input_dict() -> Dict[str, Any]:
    """Load the reference datamodel_example.yaml once per session."""
    assert DATAMODEL_EXAMPLE_PATH.exists(), (
        f"Reference data model not found at {DATAMODEL_EXAMPLE_PATH}."
    )
    with open(DATAMODEL_EXAMPLE_PATH, "r", encoding="utf-8") as fh:
        data = yaml.safe_load(fh)
    assert isinstance(data, dict), "Top-level YAML must be a mapping."
    return data


@pytest.fixture()
def input_dict(raw_input_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Deep copy so each test can mutate freely."""
    return copy.deepcopy(raw_input_dict)


@pytest.fixture()
def schema_source_path(tmp_path: pathlib.Path) -> pathlib.Path:
    """Copy of the reference schema source inside tmp_path."""
    path = tmp_path / "schema.prisma"
    path.write_text(SCHEMA_EXAMPLE_PATH.read_text(encoding="utf-8"), encoding="utf-8")
    return path


@pytest.fixture()
def input_yaml_path(
    input_dict: Dict[str, Any], schema_source_path: pathlib.Path, tmp_path: pathlib.Path
) -> pathlib.Path:
    """Write the input document (pointing at the copied schema source) to tmp_path."""
    input_dict["schemaPath"] = schema_source_path.name
    path = tmp_path / "datamodel.yaml"
    with open(path, "w", encoding="utf-8") as fh:
        yaml.dump(input_dict, fh, default_flow_style=False, allow_unicode=True)
    return path


# ---------------------------------------------------------------------------
# Model fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def default_config() -> GeneratorConfig:
    return GeneratorConfig()


@pytest.fixture()
def blog_data_model(input_dict: Dict[str, Any]) -> DataModel:
    """User/Post data model from the reference document."""
    return DataModel.model_validate(input_dict["datamodel"])


@pytest.fixture()
def self_relation_model() -> ModelDescriptor:
    """A category tree: parent/children relations back to the same model."""
    return make_model(
        "Category",
        [
            make_field("id", "Int"),
            make_field("parentId", "Int", required=False),
            make_field("parent", "Category", "object", required=False),
            make_field("children", "Category", "object", is_list=True),
        ],
    )


@pytest.fixture()
def inventory_schema_source() -> str:
    """Schema source exercising native types, comments and block attributes."""
    return textwrap.dedent(
        """\
        // Inventory schema
        datasource db {
          provider = "mysql"
          url      = env("DATABASE_URL")
        }

        model Item {
          id        String   @id @db.Char(36)
          sku       String   @unique @db.VarChar(32) // internal code
          qty       Int      @db.SmallInt
          ratio     Int      @db.UnsignedTinyInt
          price     Decimal  @db.Decimal(8, 3)
          note      String?  @db.Text
          shelf     Shelf    @relation(fields: [shelfId], references: [id])
          shelfId   Int

          @@unique([sku, shelfId])
          @@index([shelfId])
        }

        model Shelf {
          id      Int      @id
          label   String   @default("// not a comment") @db.VarChar(10)
          opened  DateTime @db.Date
          items   Item[]
        }
        """
    )


# ---------------------------------------------------------------------------
# Logging isolation
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _restore_zodgen_logger() -> Iterator[None]:
    """The CLI installs its own handler on the ``zodgen`` logger; undo it after each test."""
    root_logger = logging.getLogger("zodgen")
    handlers = list(root_logger.handlers)
    level = root_logger.level
    propagate = root_logger.propagate
    yield
    root_logger.handlers[:] = handlers
    root_logger.setLevel(level)
    root_logger.propagate = propagate
