import re
import subprocess
from typing import Callable, Dict, List, Optional, Sequence

import logger as app_logger
from models import AppRecord
from utils import label_from_package

_LOGGER = app_logger.get_logger()

ACTION_MAIN = "android.intent.action.MAIN"
CATEGORY_LAUNCHER = "android.intent.category.LAUNCHER"

# "com.example/.MainActivity" or "com.example/com.example.ui.Main"
_COMPONENT_RE = re.compile(r"^\s*(?:name=)?(?P<pkg>[A-Za-z][\w.]*)/(?P<activity>[\w.$]+)\s*$")
_LABEL_PATTERNS = (
    re.compile(r"applicationLabel='([^']+)'"),
    re.compile(r"applicationLabel=([^\s]+)"),
    re.compile(r"nonLocalizedLabel=([^\s]+)"),
)
_DEVICE_ERROR_TOKENS = ("device unauthorized", "no devices/emulators found", "device offline", "not found")

Runner = Callable[[Sequence[str]], Optional[str]]


class AdbError(RuntimeError):
    """adb itself is unusable: missing binary, no device, unauthorized."""


class AdbRunner:
    """Runs `adb shell ...` against one device and returns stdout."""

    def __init__(self, adb_path: str = "adb", serial: str = "", timeout: int = 30) -> None:
        self.adb_path = adb_path
        self.serial = serial
        self.timeout = timeout

    def base_command(self) -> List[str]:
        command = [self.adb_path]
        if self.serial:
            command += ["-s", self.serial]
        return command

    def __call__(self, args: Sequence[str]) -> Optional[str]:
        command = self.base_command() + ["shell", *args]
        try:
            result = subprocess.run(
                command,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="ignore",
                timeout=self.timeout,
                check=False,
            )
        except FileNotFoundError as exc:
            raise AdbError(f"adb executable not found: {self.adb_path}") from exc
        except subprocess.TimeoutExpired as exc:
            raise AdbError(f"adb timed out after {self.timeout}s: {' '.join(command)}") from exc
        stderr = (result.stderr or "").strip()
        if result.returncode != 0:
            lowered = stderr.casefold()
            if "device" in lowered and any(token in lowered for token in _DEVICE_ERROR_TOKENS):
                raise AdbError(stderr or f"adb exited with code {result.returncode}")
            _LOGGER.debug("adb {} failed ({}): {}", " ".join(args), result.returncode, stderr)
            return None
        return result.stdout


class AppScanner:
    """Enumerates launcher activities of the connected device."""

    def __init__(self, runner: Optional[Runner] = None) -> None:
        self.runner: Runner = runner or AdbRunner()
        self.apps: List[AppRecord] = []

    def scan(self) -> List[AppRecord]:
        output = self.runner(
            ["cmd", "package", "query-activities", "--brief", "-a", ACTION_MAIN, "-c", CATEGORY_LAUNCHER]
        )
        packages = self._parse_components(output or "")
        records = [AppRecord(display_name=self._label_for(pkg), identifier=pkg) for pkg in packages]
        self.apps = sorted(records, key=lambda app: (app.display_name, app.identifier))
        _LOGGER.info("Found {} launchable apps.", len(self.apps))
        return self.apps

    @staticmethod
    def _parse_components(output: str) -> Dict[str, str]:
        # First launcher activity per package wins.
        components: Dict[str, str] = {}
        for line in output.splitlines():
            match = _COMPONENT_RE.match(line)
            if not match:
                continue
            pkg = match.group("pkg")
            if pkg in components:
                continue
            activity = match.group("activity")
            if activity.startswith("."):
                activity = f"{pkg}{activity}"
            components[pkg] = activity
        return components

    def _label_for(self, identifier: str) -> str:
        dump = self.runner(["pm", "dump", identifier])
        label = self._extract_label(dump or "")
        return label or label_from_package(identifier)

    @staticmethod
    def _extract_label(dump: str) -> str:
        for pattern in _LABEL_PATTERNS:
            match = pattern.search(dump)
            if not match:
                continue
            label = match.group(1).strip().strip("'\"")
            if label and label != "null" and not label.startswith("0x"):
                return label
        return ""

    def is_installed(self, identifier: str) -> bool:
        output = self.runner(["pm", "path", identifier])
        return bool(output and "package:" in output)

    def launch(self, identifier: str) -> bool:
        """Start the launcher activity of a package; no-op if it is gone."""
        if not identifier or not self.is_installed(identifier):
            _LOGGER.debug("Launch skipped, package not installed: {}", identifier)
            return False
        output = self.runner(["monkey", "-p", identifier, "-c", CATEGORY_LAUNCHER, "1"])
        if output is None or "No activities found" in output:
            _LOGGER.debug("Launch failed for {}: {}", identifier, (output or "").strip())
            return False
        _LOGGER.info("Launched {}", identifier)
        return True
