"""
Test the Node Package System

Verifies that the loader discovers packaged nodes, validates their manifests
and that the executor runs them end to end.
"""

import json
import logging
from pathlib import Path

import httpx
import pytest

from addtowallet.workflows.engine.errors import NodeOperationError, UnknownNodeTypeError
from addtowallet.workflows.engine.executor import NodeExecutor, to_workflow_items
from addtowallet.workflows.engine.nodes.loader import NodePackageLoader
from addtowallet.workflows.engine.nodes.registry import NodeRegistry

PACKAGES_DIR = Path(__file__).parent.parent / "node_packages"

PASS_PARAMS = {
    "resource": "pass",
    "operation": "create",
    "card_title": "Coffee Club",
    "header": "{{ json.name }}",
    "logo_url": "https://example.com/logo.png",
    "hero_image": "https://example.com/hero.png",
    "barcode_value": "{{ json.id }}",
}
CREDENTIALS = {"addtowallet_api": {"api_key": "k"}}


@pytest.fixture
def registry():
    NodeRegistry.reset()
    NodeRegistry.initialize(PACKAGES_DIR)
    yield NodeRegistry
    NodeRegistry.reset()


def write_package(root: Path, manifest: dict, code: str) -> Path:
    package_dir = root / "custom" / manifest.get("id", "broken").replace(".", "-")
    (package_dir / "backend").mkdir(parents=True)
    (package_dir / "manifest.json").write_text(json.dumps(manifest))
    (package_dir / "backend" / "execute.py").write_text(code)
    return package_dir


ECHO_MANIFEST = {
    "id": "test.echo",
    "name": "test.echo",
    "version": 1,
    "description": "Echo items",
    "category": "UTILITY",
    "inputs": [],
    "outputs": [],
}
ECHO_CODE = """
from addtowallet.workflows.engine.definitions import WorkflowItem

async def execute(context):
    return [WorkflowItem.paired(item.json_data, i) for i, item in enumerate(context.get_input_data())]
"""


def test_discovers_addtowallet_node():
    loader = NodePackageLoader(PACKAGES_DIR)
    loader.discover_nodes()

    node = loader.get_node("addtowallet.pass")
    assert node is not None
    assert node.name == "Add To Wallet"
    assert node.validate_fn is not None
    assert [c.name for c in node.manifest.credentials] == ["addtowallet_api"]


def test_manifest_schema():
    loader = NodePackageLoader(PACKAGES_DIR)
    loader.discover_nodes()
    manifest = loader.get_node("addtowallet.pass").manifest

    defaults = manifest.input_defaults()
    assert defaults["hex_background_color"] == "#141f31"
    assert defaults["barcode_type"] == "QR_CODE"
    assert defaults["additional_fields"] == {}
    assert manifest.get_input("barcode_type").option_values() == ["QR_CODE", "PDF_417", "AZTEC", "CODE_128"]

    additional = manifest.get_input("additional_fields")
    links = next(o for o in additional.options if o.name == "links")
    assert links.typeOptions.multipleValues is True
    assert [v.name for v in links.options[0].values] == ["label", "url"]

    required = [i.name for i in manifest.required_inputs({"resource": "pass", "operation": "create"})]
    assert "card_title" in required
    assert manifest.required_inputs({"resource": "pass", "operation": "other"}) == []


def test_skips_invalid_packages(tmp_path):
    write_package(tmp_path, {"id": "broken"}, "async def execute(context):\n    return []\n")
    write_package(tmp_path, ECHO_MANIFEST, ECHO_CODE)

    loader = NodePackageLoader(tmp_path)
    nodes = loader.discover_nodes()

    assert [n.id for n in nodes] == ["test.echo"]


def test_missing_directory(tmp_path):
    loader = NodePackageLoader(tmp_path / "missing")

    assert loader.discover_nodes() == []


def test_reload_node(tmp_path):
    package_dir = write_package(tmp_path, ECHO_MANIFEST, ECHO_CODE)
    loader = NodePackageLoader(tmp_path)
    loader.discover_nodes()

    manifest = dict(ECHO_MANIFEST, description="Echo items, again")
    (package_dir / "manifest.json").write_text(json.dumps(manifest))

    assert loader.reload_node("test.echo") is True
    assert loader.get_node("test.echo").manifest.description == "Echo items, again"
    assert loader.reload_node("unknown") is False


def test_list_nodes(registry):
    nodes = registry.list_nodes()

    assert nodes["addtowallet.pass"]["credentials"] == ["addtowallet_api"]
    assert nodes["addtowallet.pass"]["category"] == "ACTION"


def test_to_workflow_items():
    items = to_workflow_items([{"a": 1}, {"json": {"b": 2}, "binary": {}}])

    assert items[0].json_data == {"a": 1}
    assert items[1].json_data == {"b": 2}


@pytest.mark.asyncio
async def test_executor_runs_pass_node(registry):
    def handler(request):
        body = json.loads(request.content)
        return httpx.Response(200, json={"cardId": body["barcodeValue"], "msg": "Card created"})

    output = await NodeExecutor.run(
        "addtowallet.pass",
        [{"name": "Ann", "id": "a1"}, {"name": "Bob", "id": "b2"}],
        PASS_PARAMS,
        credentials=CREDENTIALS,
        transport=httpx.MockTransport(handler),
    )

    assert [item.to_output() for item in output] == [
        {
            "json": {
                "cardId": "a1",
                "message": "Card created",
                "shareableUrl": "https://app.addtowallet.co/card/a1",
                "success": True,
            },
            "binary": {},
            "pairedItem": {"item": 0},
        },
        {
            "json": {
                "cardId": "b2",
                "message": "Card created",
                "shareableUrl": "https://app.addtowallet.co/card/b2",
                "success": True,
            },
            "binary": {},
            "pairedItem": {"item": 1},
        },
    ]


@pytest.mark.asyncio
async def test_executor_rejects_invalid_config(registry):
    params = dict(PASS_PARAMS)
    del params["card_title"]

    with pytest.raises(NodeOperationError, match="card_title is required"):
        await NodeExecutor.run("addtowallet.pass", [{}], params, credentials=CREDENTIALS)


@pytest.mark.asyncio
async def test_executor_unknown_node(registry):
    with pytest.raises(UnknownNodeTypeError):
        await NodeExecutor.run("nope", [{}], {})


@pytest.mark.asyncio
async def test_pass_node_logs_through_package_logger(registry, caplog):
    def handler(request):
        if json.loads(request.content)["barcodeValue"] == "bad":
            return httpx.Response(400, json={"msg": "Invalid card"})
        return httpx.Response(200, json={"cardId": "abc", "msg": "ok"})

    caplog.set_level(logging.INFO, logger="addtowallet")

    await NodeExecutor.run(
        "addtowallet.pass",
        [{"name": "Ann", "id": "a1"}, {"name": "Bob", "id": "bad"}],
        PASS_PARAMS,
        credentials=CREDENTIALS,
        continue_on_fail=True,
        transport=httpx.MockTransport(handler),
    )

    node_records = [r for r in caplog.records if r.name.startswith("addtowallet.nodes.")]
    assert any(r.levelno == logging.INFO and "Created pass abc" in r.getMessage() for r in node_records)
    assert any(r.levelno == logging.WARNING for r in node_records)
