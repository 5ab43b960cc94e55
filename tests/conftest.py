# File: tests/conftest.py
# Pytest fixtures building a minimal Laravel project on disk.

import argparse
import json
from datetime import datetime
from pathlib import Path
from typing import Dict

import pytest

from laravel_crud_generator.config import GeneratorConfig


MODEL_PHP = """<?php

namespace App\\Models;

use Illuminate\\Database\\Eloquent\\Factories\\HasFactory;
use Illuminate\\Database\\Eloquent\\Model;

class Product extends Model
{
    use HasFactory;
}
"""

MIGRATION_PHP = """<?php

use Illuminate\\Database\\Migrations\\Migration;
use Illuminate\\Database\\Schema\\Blueprint;
use Illuminate\\Support\\Facades\\Schema;

return new class extends Migration
{
    public function up(): void
    {
        Schema::create('products', function (Blueprint $table) {
            $table->id();
            $table->timestamps();
        });
    }

    public function down(): void
    {
        Schema::dropIfExists('products');
    }
};
"""

ROUTES_PHP = """<?php

use Illuminate\\Support\\Facades\\Route;
"""

MIGRATION_FILE = "database/migrations/2024_01_01_000000_create_products_table.php"

PRODUCT_SCHEMA = {
    "Product": {
        "name": "required|string",
        "price": "nullable|numeric",
    }
}

FIXED_NOW = datetime(2024, 5, 6, 7, 8, 9)


def snapshot(root: Path) -> Dict[str, bytes]:
    """Every file under ``root`` keyed by its relative path."""
    return {
        path.relative_to(root).as_posix(): path.read_bytes()
        for path in sorted(root.rglob("*"))
        if path.is_file()
    }


@pytest.fixture
def empty_project(tmp_path: Path) -> Path:
    """A project with nothing but a route file."""
    (tmp_path / "routes").mkdir()
    (tmp_path / "routes" / "api.php").write_text(ROUTES_PHP, encoding="utf-8")
    return tmp_path


@pytest.fixture
def laravel_project(empty_project: Path) -> Path:
    """A project where `make:model Product -m` has already run."""
    model = empty_project / "app" / "Models" / "Product.php"
    model.parent.mkdir(parents=True)
    model.write_text(MODEL_PHP, encoding="utf-8")

    migration = empty_project / MIGRATION_FILE
    migration.parent.mkdir(parents=True)
    migration.write_text(MIGRATION_PHP, encoding="utf-8")
    return empty_project


@pytest.fixture
def schema_file(laravel_project: Path) -> Path:
    path = laravel_project / "schemas" / "crud.json"
    path.parent.mkdir()
    path.write_text(json.dumps(PRODUCT_SCHEMA), encoding="utf-8")
    return path


@pytest.fixture
def product_config(laravel_project: Path, schema_file: Path) -> GeneratorConfig:
    return GeneratorConfig(
        name="product",
        project_root=str(laravel_project),
        schema_path="schemas/crud.json",
    )


@pytest.fixture
def cli_namespace():
    """Factory for the namespace `load_config` receives from the CLI."""
    def make(**overrides) -> argparse.Namespace:
        values = dict(
            name="product",
            schema_path=None,
            api_route=None,
            controller_route=None,
            project_root=None,
            force=None,
            create_stubs=None,
        )
        values.update(overrides)
        return argparse.Namespace(**values)
    return make
