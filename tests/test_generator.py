# File: tests/test_generator.py
# End-to-end tests of the generation plan against a project on disk.

import json
from pathlib import Path
from unittest.mock import patch

from laravel_crud_generator.config import GeneratorConfig
from laravel_crud_generator.domain.models import GenerationContext, StepStatus
from laravel_crud_generator.generator import CrudGenerator, generate_crud
from laravel_crud_generator.schema import SchemaDefinition
from laravel_crud_generator.exceptions import (
    FileEncodingError,
    MigrationFileNotFoundError,
    ModelFileNotFoundError,
    RouteFileNotFoundError,
    SchemaFileNotFoundError,
    SchemaFormatError,
)

from conftest import FIXED_NOW, MIGRATION_FILE, MIGRATION_PHP, MODEL_PHP, PRODUCT_SCHEMA, snapshot


ROUTE_LINE = "Route::apiResource('products', \\App\\Http\\Controllers\\ProductController::class);"

DTO_FILES = [
    f"app/DTOs/{layer}/Product/{kind}ProductDTO.php"
    for layer in ("Model", "Service")
    for kind in ("Store", "Update", "Delete", "List")
]


def _statuses(report):
    return {step.step: step.status for step in report.steps}


def test_full_run_on_scaffolded_project(laravel_project: Path, product_config: GeneratorConfig):
    report = CrudGenerator(product_config).generate()

    assert report.succeeded
    assert report.model_name == "Product"
    assert [step.step for step in report.steps][:4] == ["model", "migration", "controller", "service"]
    assert [step.step for step in report.steps][-3:] == ["responses helper", "resource", "route"]
    assert len(report.steps) == 15

    statuses = _statuses(report)
    assert statuses["model"] is StepStatus.PATCHED
    assert statuses["migration"] is StepStatus.PATCHED
    assert statuses["route"] is StepStatus.PATCHED
    assert statuses["controller"] is StepStatus.CREATED

    model = (laravel_project / "app/Models/Product.php").read_text()
    assert model.startswith(MODEL_PHP[:MODEL_PHP.rindex("}")])
    assert "public static function storeProduct($dto)" in model

    migration = (laravel_project / MIGRATION_FILE).read_text()
    positions = [
        migration.index("$table->id();"),
        migration.index("$table->string('name');"),
        migration.index("$table->float('price')->nullable();"),
        migration.index("$table->timestamps();"),
    ]
    assert positions == sorted(positions)

    for dto in DTO_FILES:
        assert (laravel_project / dto).is_file(), dto
    store_dto = (laravel_project / "app/DTOs/Service/Product/StoreProductDTO.php").read_text()
    assert "'name' => 'required|string'," in store_dto

    assert (laravel_project / "app/Http/Controllers/ProductController.php").is_file()
    assert (laravel_project / "app/Services/ProductService.php").is_file()
    assert (laravel_project / "app/Http/Resources/ProductResource.php").is_file()
    assert (laravel_project / "app/Helpers/ResponsesHelper.php").is_file()

    routes = (laravel_project / "routes/api.php").read_text()
    assert routes.count(ROUTE_LINE) == 1


def test_second_run_is_a_no_op(laravel_project: Path, product_config: GeneratorConfig):
    CrudGenerator(product_config).generate()
    before = snapshot(laravel_project)

    report = CrudGenerator(product_config).generate()

    assert report.succeeded
    assert all(step.status is StepStatus.SKIPPED for step in report.steps)
    assert snapshot(laravel_project) == before


def test_force_overwrites_generated_files_but_not_helper(laravel_project: Path, product_config: GeneratorConfig):
    CrudGenerator(product_config).generate()
    controller = laravel_project / "app/Http/Controllers/ProductController.php"
    helper = laravel_project / "app/Helpers/ResponsesHelper.php"
    controller.write_text("edited")
    helper.write_text("edited")

    forced = product_config.model_copy(update={"force": True})
    report = CrudGenerator(forced).generate()

    statuses = _statuses(report)
    assert statuses["controller"] is StepStatus.CREATED
    assert statuses["responses helper"] is StepStatus.SKIPPED
    assert statuses["model"] is StepStatus.SKIPPED
    assert statuses["route"] is StepStatus.SKIPPED
    assert controller.read_text() != "edited"
    assert helper.read_text() == "edited"


def test_missing_route_file_halts_at_route(laravel_project: Path, product_config: GeneratorConfig):
    (laravel_project / "routes/api.php").unlink()

    report = CrudGenerator(product_config).generate()

    assert not report.succeeded
    assert report.failed_step.step == "route"
    assert isinstance(report.failed_step.error, RouteFileNotFoundError)
    assert report.steps[-1] is report.failed_step
    # Steps that already ran stay applied
    assert (laravel_project / "app/Http/Controllers/ProductController.php").is_file()


def test_missing_migration_without_stubs_halts(laravel_project: Path, product_config: GeneratorConfig):
    (laravel_project / MIGRATION_FILE).unlink()
    config = product_config.model_copy(update={"create_stubs": False})

    report = CrudGenerator(config).generate()

    assert report.failed_step.step == "migration"
    assert isinstance(report.failed_step.error, MigrationFileNotFoundError)
    assert [step.step for step in report.steps] == ["model", "migration"]
    assert not (laravel_project / "app/Http/Controllers/ProductController.php").exists()


def test_missing_model_without_stubs_changes_nothing(laravel_project: Path, product_config: GeneratorConfig):
    (laravel_project / "app/Models/Product.php").unlink()
    before = snapshot(laravel_project)
    config = product_config.model_copy(update={"create_stubs": False})

    report = CrudGenerator(config).generate()

    assert report.failed_step.step == "model"
    assert isinstance(report.failed_step.error, ModelFileNotFoundError)
    assert snapshot(laravel_project) == before


def test_missing_schema_file_fails_before_any_write(laravel_project: Path):
    before = snapshot(laravel_project)
    config = GeneratorConfig(name="product", project_root=str(laravel_project), schema_path="nope.yaml")

    report = CrudGenerator(config).generate()

    assert report.failed_step.step == "schema"
    assert isinstance(report.failed_step.error, SchemaFileNotFoundError)
    assert snapshot(laravel_project) == before


def test_invalid_name_fails_before_any_write(laravel_project: Path):
    before = snapshot(laravel_project)
    config = GeneratorConfig(name="../product", project_root=str(laravel_project))

    report = CrudGenerator(config).generate()

    assert [step.step for step in report.steps] == ["naming"]
    assert report.steps[0].status is StepStatus.FAILED
    assert snapshot(laravel_project) == before


def test_stubs_created_in_empty_project(empty_project: Path):
    (empty_project / "crud.json").write_text(json.dumps(PRODUCT_SCHEMA))
    config = GeneratorConfig(name="product", project_root=str(empty_project), schema_path="crud.json")

    report = CrudGenerator(config, clock=lambda: FIXED_NOW).generate()

    assert report.succeeded
    statuses = _statuses(report)
    assert statuses["model"] is StepStatus.CREATED
    assert statuses["migration"] is StepStatus.CREATED

    model = (empty_project / "app/Models/Product.php").read_text()
    assert "class Product extends Model" in model
    assert "'price'," in model
    assert "public static function listProducts($dto)" in model

    migration = empty_project / "database/migrations/2024_05_06_070809_create_products_table.php"
    text = migration.read_text()
    assert text.index("$table->string('name');") < text.index("$table->timestamps();")

    again = CrudGenerator(config, clock=lambda: FIXED_NOW).generate()
    assert _statuses(again)["migration"] is StepStatus.SKIPPED


def test_no_schema_skips_migration_columns(laravel_project: Path):
    config = GeneratorConfig(name="product", project_root=str(laravel_project))

    report = CrudGenerator(config).generate()

    assert report.succeeded
    assert _statuses(report)["migration"] is StepStatus.SKIPPED
    store_dto = (laravel_project / "app/DTOs/Service/Product/StoreProductDTO.php").read_text()
    assert "return [];" in store_dto


def test_controller_sub_path(laravel_project: Path, product_config: GeneratorConfig):
    config = product_config.model_copy(update={"controller_route": "Api/V1"})

    report = generate_crud(config)

    assert report.succeeded
    controller = laravel_project / "app/Http/Controllers/Api/V1/ProductController.php"
    assert "namespace App\\Http\\Controllers\\Api\\V1;" in controller.read_text()
    routes = (laravel_project / "routes/api.php").read_text()
    assert "\\App\\Http\\Controllers\\Api\\V1\\ProductController::class" in routes


def test_report_to_dict(laravel_project: Path, product_config: GeneratorConfig):
    report = CrudGenerator(product_config).generate()

    first = report.steps[0].to_dict()

    assert first["step"] == "model"
    assert first["status"] == "patched"
    assert first["error"] is None
    assert report.counts()["failed"] == 0


def test_model_with_invalid_utf8_is_a_failed_step(laravel_project: Path, product_config: GeneratorConfig):
    model = laravel_project / "app/Models/Product.php"
    model.write_bytes(MODEL_PHP.encode("utf-8").replace(b"use HasFactory;", b"use HasFactory; // \xff\xfe"))

    report = CrudGenerator(product_config).generate()

    assert report.failed_step.step == "model"
    assert isinstance(report.failed_step.error, FileEncodingError)
    assert report.failed_step.path == str(model)
    assert len(report.steps) == 1


def test_schema_with_invalid_utf8_is_a_failed_step(laravel_project: Path):
    schema = laravel_project / "crud.yaml"
    schema.write_bytes(b"Product:\n  name: required|string # \xff\n")
    config = GeneratorConfig(name="product", project_root=str(laravel_project), schema_path="crud.yaml")

    report = CrudGenerator(config).generate()

    assert report.failed_step.step == "schema"
    assert isinstance(report.failed_step.error, SchemaFormatError)
    assert report.failed_step.path == str(schema)


def test_unreadable_schema_is_a_failed_step(laravel_project: Path, product_config: GeneratorConfig):
    with patch("laravel_crud_generator.generator.load_schema", side_effect=PermissionError("denied")):
        report = CrudGenerator(product_config).generate()

    assert [step.step for step in report.steps] == ["schema"]
    assert isinstance(report.failed_step.error, PermissionError)


def test_existing_migration_found_for_latin_plural(empty_project: Path):
    migrations = empty_project / "database" / "migrations"
    migrations.mkdir(parents=True)
    existing = migrations / "2024_01_01_000000_create_indices_table.php"
    existing.write_text(MIGRATION_PHP.replace("products", "indices"))
    (empty_project / "crud.json").write_text(json.dumps({"Index": {"name": "required|string"}}))
    config = GeneratorConfig(name="index", project_root=str(empty_project), schema_path="crud.json")

    report = CrudGenerator(config, clock=lambda: FIXED_NOW).generate()

    assert _statuses(report)["migration"] is StepStatus.PATCHED
    assert [p.name for p in migrations.iterdir()] == [existing.name]
    assert "$table->string('name');" in existing.read_text()


def test_plan_orders_dto_layers_and_places_helper(product_config: GeneratorConfig):
    context = GenerationContext.build("product")
    schema = SchemaDefinition(model_name="Product")

    names = [name for name, _ in CrudGenerator(product_config).plan(context, schema)]

    assert names[4:8] == [
        "dto:Model/StoreProductDTO",
        "dto:Service/StoreProductDTO",
        "dto:Model/UpdateProductDTO",
        "dto:Service/UpdateProductDTO",
    ]
    assert str(context.responses_helper_path) == "app/Helpers/ResponsesHelper.php"
