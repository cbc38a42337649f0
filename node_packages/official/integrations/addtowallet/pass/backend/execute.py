"""
AddToWallet Pass Node Plugin

Create digital wallet passes (Apple Wallet / Google Wallet) via the
AddToWallet API. One pass is created per input item.
"""

import logging
from typing import Any, Dict, List

from addtowallet.workflows.engine.context import NodeContext
from addtowallet.workflows.engine.definitions import WorkflowItem
from addtowallet.workflows.engine.errors import NodeOperationError

logger = logging.getLogger("addtowallet.nodes.addtowallet_pass")

CREDENTIAL_NAME = "addtowallet_api"
CREATE_PASS_PATH = "/api/card/create"

DEFAULT_BACKGROUND_COLOR = "#141f31"
DEFAULT_APPLE_FONT_COLOR = "#FFFFFF"
DEFAULT_BARCODE_TYPE = "QR_CODE"
BARCODE_TYPES = ["QR_CODE", "PDF_417", "AZTEC", "CODE_128"]

REQUIRED_FIELDS = ["card_title", "header", "logo_url", "hero_image", "barcode_value"]


def _group_entries(collection: Any, group: str) -> List[Dict[str, Any]]:
    """Entries of one fixedCollection group, e.g. {"link": [...]} -> [...]."""
    if not isinstance(collection, dict):
        return []
    entries = collection.get(group) or []
    # A single-value group may arrive as one dict
    if isinstance(entries, dict):
        entries = [entries]
    return entries


def text_modules_data(additional_fields: Dict[str, Any]) -> List[Dict[str, Any]]:
    return [
        {
            "id": f"module{idx}",
            "header": module.get("label", ""),
            "body": module.get("value", ""),
        }
        for idx, module in enumerate(_group_entries(additional_fields.get("text_modules"), "module"))
    ]


def links_module_data(additional_fields: Dict[str, Any]) -> List[Dict[str, Any]]:
    return [
        {"label": link.get("label", ""), "url": link.get("url", "")}
        for link in _group_entries(additional_fields.get("links"), "link")
    ]


def build_pass_body(params: Dict[str, Any]) -> Dict[str, Any]:
    """
    Map node parameters to the AddToWallet create-card body.

    Every key is always sent; empty optional values fall back to their
    defaults. URLs and colors are passed through unchecked.
    """
    additional_fields = params.get("additional_fields") or {}
    if not isinstance(additional_fields, dict):
        raise NodeOperationError(
            f"Additional fields must be an object, got {type(additional_fields).__name__}"
        )

    return {
        "cardTitle": params.get("card_title") or "",
        "header": params.get("header") or "",
        "logoUrl": params.get("logo_url") or "",
        "rectangleLogo": additional_fields.get("rectangle_logo") or "",
        "heroImage": params.get("hero_image") or "",
        "googleHeroImage": additional_fields.get("google_hero_image") or "",
        "appleHeroImage": additional_fields.get("apple_hero_image") or "",
        "hexBackgroundColor": params.get("hex_background_color") or DEFAULT_BACKGROUND_COLOR,
        "appleFontColor": additional_fields.get("apple_font_color") or DEFAULT_APPLE_FONT_COLOR,
        "barcodeType": params.get("barcode_type") or DEFAULT_BARCODE_TYPE,
        "barcodeValue": params.get("barcode_value") or "",
        "barcodeAltText": additional_fields.get("barcode_alt_text") or "",
        "textModulesData": text_modules_data(additional_fields),
        "linksModuleData": links_module_data(additional_fields),
    }


def shape_pass_response(response: Dict[str, Any], base_url: str) -> Dict[str, Any]:
    card_id = response.get("cardId")
    return {
        "cardId": card_id,
        "message": response.get("msg"),
        "shareableUrl": f"{base_url}/card/{card_id}",
        "success": True,
    }


def _read_pass_params(context: NodeContext, item_index: int) -> Dict[str, Any]:
    params = {
        name: context.get_node_parameter(name, item_index)
        for name in (
            "card_title",
            "header",
            "logo_url",
            "hero_image",
            "hex_background_color",
            "barcode_type",
            "barcode_value",
        )
    }
    params["additional_fields"] = context.get_node_parameter("additional_fields", item_index, {})
    return params


async def create_pass(context: NodeContext, item_index: int) -> Dict[str, Any]:
    body = build_pass_body(_read_pass_params(context, item_index))
    response = await context.http_request_with_authentication(
        CREDENTIAL_NAME, "POST", CREATE_PASS_PATH, body=body
    )
    if not isinstance(response, dict):
        raise NodeOperationError("Unexpected response from AddToWallet API", node_id=context.node_id)

    base_url = context.get_credentials(CREDENTIAL_NAME)["base_url"]
    return shape_pass_response(response, base_url)


async def execute(context: NodeContext) -> List[WorkflowItem]:
    """
    Create one wallet pass per input item.

    Items are processed in order. A failing item aborts the run unless
    continue-on-fail is enabled, in which case it yields an error record.
    """
    items = context.get_input_data()
    results: List[WorkflowItem] = []

    for i in range(len(items)):
        try:
            resource = context.get_node_parameter("resource", i)
            operation = context.get_node_parameter("operation", i)

            if resource == "pass" and operation == "create":
                output = await create_pass(context, i)
            else:
                raise NodeOperationError(
                    f'The operation "{operation}" is not supported for resource "{resource}"',
                    node_id=context.node_id,
                )

            logger.info(f"Created pass {output['cardId']} for item {i}")
            results.append(WorkflowItem.paired(output, i))

        except Exception as e:
            if context.continue_on_fail():
                logger.warning(f"Item {i} failed, continuing: {e}")
                results.append(WorkflowItem.paired({"error": str(e), "success": False}, i))
                continue
            raise

    return results


async def validate(config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Validate configuration before execution.

    Returns:
        Dict with 'valid' (bool) and optional 'errors' (list)
    """
    errors = []

    for field in REQUIRED_FIELDS:
        if not config.get(field):
            errors.append(f"{field} is required")

    barcode_type = config.get("barcode_type")
    # Expressions are resolved per item at run time
    if barcode_type and "{{" not in str(barcode_type) and barcode_type not in BARCODE_TYPES:
        errors.append(f"Invalid barcode type: {barcode_type}")

    return {
        "valid": len(errors) == 0,
        "errors": errors
    }
