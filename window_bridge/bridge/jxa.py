"""macOS accessibility bridge — JavaScript for Automation over ``osascript``.

Each primitive is one ``osascript -l JavaScript -`` process.  The script body
receives its arguments as a JSON literal (``ARGS``) and returns a value that
is wrapped as ``{"result": ...}`` on stdout.  Calls are strictly sequential:
the caller awaits each process before starting the next, since concurrent
System Events sessions can corrupt each other's process/window references.

Window addressing: a :class:`WindowRef` is re-resolved inside every script.
A non-empty title is matched exactly; an empty title falls back to the
window index.
"""

from __future__ import annotations

import asyncio
import json
import shutil
from typing import Any

from window_bridge.bridge.base import (
    AccessibilityBridge,
    DisplayService,
    ProcessWindows,
    RawDisplay,
    RawWindow,
    WindowRef,
)
from window_bridge.exceptions import BridgeScriptError, BridgeUnavailableError
from window_bridge.logging import get_logger

log = get_logger(__name__)

# ---------------------------------------------------------------------------
# Scripts
# ---------------------------------------------------------------------------

# windowAt trusts the enumerated index while its title still matches and
# only scans by title when the window list has shifted.
_PRELUDE = """
const se = Application("System Events");

function readWindow(w, i) {
  try {
    const pos = w.position();
    const size = w.size();
    let minimized = null;
    try {
      minimized = w.attributes.byName("AXMinimized").value();
    } catch (e) {
      try { minimized = w.miniaturized(); } catch (e2) {}
    }
    return {index: i, title: w.name() || "", x: pos[0], y: pos[1],
            width: size[0], height: size[1], minimized: minimized};
  } catch (e) {
    return {index: i, error: String(e)};
  }
}

function windowAt(ref) {
  const wins = se.processes.byName(ref.app_name).windows();
  const inRange = ref.index >= 0 && ref.index < wins.length;
  if (inRange && (!ref.title || wins[ref.index].name() === ref.title)) {
    return wins[ref.index];
  }
  if (ref.title) {
    for (let i = 0; i < wins.length; i++) {
      if (wins[i].name() === ref.title) return wins[i];
    }
    throw new Error("window '" + ref.title + "' not found in " + ref.app_name);
  }
  throw new Error("window index " + ref.index + " out of range in " + ref.app_name);
}
"""

_SNAPSHOT = """
const out = [];
const procs = se.processes.whose({visible: true})();
for (const p of procs) {
  let name;
  try { name = p.name(); } catch (e) { continue; }
  const entry = {app_name: name, windows: [], error: null};
  try {
    const wins = p.windows();
    for (let i = 0; i < wins.length; i++) entry.windows.push(readWindow(wins[i], i));
  } catch (e) {
    entry.error = String(e);
  }
  out.push(entry);
}
return out;
"""

_LIST_WINDOWS = """
const wins = se.processes.byName(ARGS.app_name).windows();
const out = [];
for (let i = 0; i < wins.length; i++) out.push(readWindow(wins[i], i));
return out;
"""

_LIST_PROCESSES = "return se.processes.whose({visible: true}).name();"

_FRONTMOST_APP = "return se.processes.whose({frontmost: true})[0].name();"

_APP_ICON = """
ObjC.import("AppKit");
const workspace = $.NSWorkspace.sharedWorkspace;
const apps = ObjC.unwrap(workspace.runningApplications);
for (let j = 0; j < apps.length; j++) {
  const app = apps[j];
  if (ObjC.unwrap(app.localizedName) !== ARGS.app_name) continue;
  const bundleURL = app.bundleURL;
  if (!bundleURL || bundleURL.isNil()) continue;
  const icon = workspace.iconForFile(ObjC.unwrap(bundleURL.path));
  if (!icon) continue;
  icon.setSize($.NSMakeSize(ARGS.size, ARGS.size));
  const rep = $.NSBitmapImageRep.imageRepWithData(icon.TIFFRepresentation);
  const png = rep.representationUsingTypeProperties($.NSBitmapImageFileTypePNG, $.NSDictionary.dictionary);
  return "data:image/png;base64," + ObjC.unwrap(png.base64EncodedStringWithOptions(0));
}
return null;
"""

_ACTIVATE = "Application(ARGS.app_name).activate(); return true;"

_SET_FRONTMOST = "se.processes.byName(ARGS.app_name).frontmost = true; return true;"

_SET_POSITION = "windowAt(ARGS.ref).position = [ARGS.x, ARGS.y]; return true;"

_SET_SIZE = "windowAt(ARGS.ref).size = [ARGS.width, ARGS.height]; return true;"

_SET_MINIMIZED = """
windowAt(ARGS.ref).attributes.byName("AXMinimized").value = ARGS.minimized;
return true;
"""

_CLICK_CONTROL = """
const buttons = windowAt(ARGS.ref).buttons();
if (ARGS.subrole === null) {
  if (buttons.length === 0) return false;
  se.click(buttons[0]);
  return true;
}
for (const b of buttons) {
  let subrole = null;
  try { subrole = b.subrole(); } catch (e) {}
  if (subrole === ARGS.subrole) {
    se.click(b);
    return true;
  }
}
return false;
"""

_KEYSTROKE = """
se.keystroke(ARGS.key, {using: ARGS.modifiers.map(function (m) { return m + " down"; })});
return true;
"""

_QUIT_APP = "Application(ARGS.app_name).quit(); return true;"

_DISPLAYS = """
ObjC.import("AppKit");
const screens = ObjC.unwrap($.NSScreen.screens);
const out = [];
if (screens.length === 0) return out;
const primaryHeight = screens[0].frame.size.height;
for (let i = 0; i < screens.length; i++) {
  const s = screens[i];
  const f = s.frame;
  let id = String(i);
  try { id = String(ObjC.unwrap(s.deviceDescription.objectForKey("NSScreenNumber"))); } catch (e) {}
  out.push({id: id, x: f.origin.x, y: primaryHeight - (f.origin.y + f.size.height),
            width: f.size.width, height: f.size.height, is_primary: i === 0});
}
return out;
"""


# ---------------------------------------------------------------------------
# Runner
# ---------------------------------------------------------------------------


class ScriptRunner:
    """Runs JXA script bodies and decodes their JSON result."""

    def __init__(self, osascript_path: str = "osascript", timeout: float = 10.0) -> None:
        self._executable = shutil.which(osascript_path)
        self._timeout = timeout

    @property
    def available(self) -> bool:
        return self._executable is not None

    def build_script(self, body: str, args: dict[str, Any]) -> str:
        return (
            f"{_PRELUDE}\n"
            f"const ARGS = {json.dumps(args)};\n"
            "const __result = (function () {\n"
            f"{body}\n"
            "})();\n"
            "JSON.stringify({result: __result === undefined ? null : __result});\n"
        )

    async def run(self, operation: str, body: str, args: dict[str, Any] | None = None) -> Any:
        if self._executable is None:
            raise BridgeUnavailableError(operation, "osascript executable not found")

        script = self.build_script(body, args or {})
        try:
            proc = await asyncio.create_subprocess_exec(
                self._executable,
                "-l",
                "JavaScript",
                "-",
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            raise BridgeUnavailableError(operation, str(exc)) from exc

        try:
            stdout, stderr = await asyncio.wait_for(
                proc.communicate(input=script.encode()), timeout=self._timeout
            )
        except asyncio.TimeoutError:
            proc.kill()
            await proc.communicate()
            raise BridgeUnavailableError(operation, f"timed out after {self._timeout}s")

        if proc.returncode != 0:
            raise BridgeScriptError(
                operation, stderr.decode(errors="replace"), proc.returncode
            )

        text = stdout.decode(errors="replace").strip()
        try:
            payload = json.loads(text)
        except json.JSONDecodeError as exc:
            raise BridgeScriptError(operation, f"unreadable output: {text[:200]!r}") from exc
        if not isinstance(payload, dict) or "result" not in payload:
            raise BridgeScriptError(operation, f"unexpected output: {text[:200]!r}")
        return payload["result"]


def _ref_args(ref: WindowRef) -> dict[str, Any]:
    return {"app_name": ref.app_name, "index": ref.index, "title": ref.title}


def _raw_window(data: dict[str, Any]) -> RawWindow:
    return RawWindow(
        index=int(data.get("index", 0)),
        title=data.get("title") or "",
        x=data.get("x"),
        y=data.get("y"),
        width=data.get("width"),
        height=data.get("height"),
        minimized=data.get("minimized"),
        error=data.get("error"),
    )


# ---------------------------------------------------------------------------
# Bridge
# ---------------------------------------------------------------------------


class JXABridge(AccessibilityBridge):
    """System Events accessibility bridge for macOS."""

    def __init__(self, runner: ScriptRunner | None = None, icon_size: int = 32) -> None:
        self._runner = runner or ScriptRunner()
        self._icon_size = icon_size
        if not self._runner.available:
            log.warning("osascript_missing", hint="the JXA bridge only works on macOS")

    async def snapshot(self) -> list[ProcessWindows]:
        data = await self._runner.run("snapshot", _SNAPSHOT)
        return [
            ProcessWindows(
                app_name=entry["app_name"],
                windows=[_raw_window(w) for w in entry.get("windows") or []],
                error=entry.get("error"),
            )
            for entry in data or []
        ]

    async def list_windows(self, app_name: str) -> list[RawWindow]:
        data = await self._runner.run("list_windows", _LIST_WINDOWS, {"app_name": app_name})
        return [_raw_window(w) for w in data or []]

    async def list_processes(self) -> list[str]:
        return list(await self._runner.run("list_processes", _LIST_PROCESSES) or [])

    async def frontmost_app(self) -> str:
        return str(await self._runner.run("frontmost_app", _FRONTMOST_APP) or "")

    async def app_icon(self, app_name: str) -> str | None:
        return await self._runner.run(
            "app_icon", _APP_ICON, {"app_name": app_name, "size": self._icon_size}
        )

    async def activate(self, app_name: str) -> None:
        await self._runner.run("activate", _ACTIVATE, {"app_name": app_name})

    async def set_frontmost(self, app_name: str) -> None:
        await self._runner.run("set_frontmost", _SET_FRONTMOST, {"app_name": app_name})

    async def set_position(self, ref: WindowRef, x: float, y: float) -> None:
        await self._runner.run(
            "set_position", _SET_POSITION, {"ref": _ref_args(ref), "x": x, "y": y}
        )

    async def set_size(self, ref: WindowRef, width: float, height: float) -> None:
        await self._runner.run(
            "set_size", _SET_SIZE, {"ref": _ref_args(ref), "width": width, "height": height}
        )

    async def set_minimized(self, ref: WindowRef, minimized: bool) -> None:
        await self._runner.run(
            "set_minimized", _SET_MINIMIZED, {"ref": _ref_args(ref), "minimized": minimized}
        )

    async def click_control(self, ref: WindowRef, subrole: str | None = None) -> bool:
        result = await self._runner.run(
            "click_control", _CLICK_CONTROL, {"ref": _ref_args(ref), "subrole": subrole}
        )
        return bool(result)

    async def keystroke(self, app_name: str, key: str, modifiers: list[str]) -> None:
        await self._runner.run(
            "keystroke", _KEYSTROKE, {"app_name": app_name, "key": key, "modifiers": modifiers}
        )

    async def quit_app(self, app_name: str) -> None:
        await self._runner.run("quit_app", _QUIT_APP, {"app_name": app_name})


class JXADisplayService(DisplayService):
    """Reads ``NSScreen.screens`` and converts to top-left coordinates."""

    def __init__(self, runner: ScriptRunner | None = None) -> None:
        self._runner = runner or ScriptRunner()

    async def list_displays(self) -> list[RawDisplay]:
        data = await self._runner.run("list_displays", _DISPLAYS)
        return [
            RawDisplay(
                id=str(d["id"]),
                x=float(d["x"]),
                y=float(d["y"]),
                width=float(d["width"]),
                height=float(d["height"]),
                is_primary=bool(d.get("is_primary", False)),
            )
            for d in data or []
        ]
