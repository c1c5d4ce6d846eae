"""Tools backed by the HTTP agent tweak running on the device."""

from __future__ import annotations

import base64
import json
import os
from typing import TYPE_CHECKING, Any

from ...security import ensure_allowed_local_path
from ..contracts import NoArgs, ScreenshotArgs, ToolResult, TweakRequestArgs

if TYPE_CHECKING:
    from ..server import IPhoneSSHServer, ToolContext


def _format_data(value: Any) -> str:
    if isinstance(value, str):
        return value
    try:
        return json.dumps(value, indent=2)
    except (TypeError, ValueError):
        return str(value)


def tweak_status(context: ToolContext, args: NoArgs) -> ToolResult:
    response = context.tweak.request("/status")
    if not response.ok:
        return ToolResult(
            f"Tweak status request failed: {response.error or response.raw}", is_error=True
        )
    return ToolResult(f"status={response.status}\n{_format_data(response.data)}")


def tweak_request(context: ToolContext, args: TweakRequestArgs) -> ToolResult:
    if not args.endpoint.startswith("/"):
        return ToolResult("Endpoint must start with '/'.", is_error=True)

    response = context.tweak.request(args.endpoint, args.method, args.body)
    if not response.ok:
        return ToolResult(
            f"Tweak request failed: endpoint={args.endpoint} status={response.status} "
            f"error={response.error or response.raw}",
            is_error=True,
        )
    return ToolResult(f"status={response.status}\n{_format_data(response.data)}")


def take_screenshot(context: ToolContext, args: ScreenshotArgs) -> ToolResult:
    """Capture a PNG through ``/screenshot``; save it locally or return it inline."""

    response = context.tweak.request("/screenshot", "GET")
    if not response.ok or not isinstance(response.data, dict):
        return ToolResult(
            f"Screenshot request failed: {response.error or response.raw}", is_error=True
        )

    image = response.data.get("image")
    if not isinstance(image, str) or not image:
        return ToolResult(
            "Screenshot endpoint did not return image payload. "
            f"Raw: {_format_data(response.data)}",
            is_error=True,
        )

    if args.save_path:
        local_path = ensure_allowed_local_path(args.save_path, context.config.local_artifact_roots)
        os.makedirs(os.path.dirname(local_path), exist_ok=True)
        with open(local_path, "wb") as f:
            f.write(base64.b64decode(image))
        return ToolResult(f"Screenshot saved to {local_path}")

    return ToolResult("Screenshot captured.", image=image)


def register_tools(server: IPhoneSSHServer) -> None:
    server.register_tool(
        name="iphone_tweak_status",
        description="Check tweak HTTP status endpoint (/status).",
        model=NoArgs,
        handler=tweak_status,
    )
    server.register_tool(
        name="iphone_tweak_request",
        description="Make arbitrary HTTP request to tweak endpoint.",
        model=TweakRequestArgs,
        handler=tweak_request,
    )
    server.register_tool(
        name="iphone_take_screenshot",
        description="Capture screenshot from tweak endpoint (/screenshot).",
        model=ScreenshotArgs,
        handler=take_screenshot,
    )
