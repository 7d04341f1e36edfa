"""Host capability objects.

Every bootstrap step talks to the machine through a HostEnvironment so the
workflow can run against the real system, print a dry-run plan, or be
driven by a fake in tests.
"""

import io
import os
import platform
import pwd
import re
import shutil
import subprocess
import tarfile
from abc import ABC, abstractmethod
from pathlib import Path

import requests
from rich.console import Console
from rich.markup import escape

from kube_bootstrap.exceptions import CommandError, DownloadError, HostError
from kube_bootstrap.logging_config import get_logger

logger = get_logger(__name__)

# Connect/read timeouts for HTTPS fetches
FETCH_TIMEOUT = (10, 600)

ROUTE_PROBE_ADDRESS = "1.1.1.1"


def parse_route_source(output: str) -> str | None:
    """Extract the source address from `ip route get` output."""
    match = re.search(r"\bsrc\s+(\S+)", output)
    return match.group(1) if match else None


class HostEnvironment(ABC):
    """Interface for everything the bootstrap does to a host.

    File and account failures surface as HostError, command failures as
    CommandError and download failures as DownloadError.
    """

    @abstractmethod
    def is_root(self) -> bool: ...

    @abstractmethod
    def run(
        self,
        cmd: list[str],
        input: str | bytes | None = None,
        env: dict[str, str] | None = None,
        capture: bool = False,
    ) -> str:
        """Run a command, raising CommandError on a non-zero exit.

        Returns:
            The command's stdout when capture is True, otherwise ""
        """

    @abstractmethod
    def run_shell(self, command: str) -> None:
        """Run a command line through the shell exactly as given."""

    @abstractmethod
    def read_text(self, path: Path, default: str | None = None) -> str:
        """Return the file's contents.

        A missing file returns default when one is given, otherwise raises
        HostError like any other read failure.
        """

    @abstractmethod
    def write_text(self, path: Path, content: str, append: bool = False) -> None: ...

    @abstractmethod
    def make_dirs(self, path: Path) -> None: ...

    @abstractmethod
    def copy_file(self, src: Path, dst: Path) -> None: ...

    @abstractmethod
    def chown(self, path: Path, user: str) -> None: ...

    @abstractmethod
    def fetch(self, url: str) -> bytes: ...

    @abstractmethod
    def extract_member(self, archive: bytes, member: str, dest_dir: Path) -> None:
        """Extract a single file from a gzipped tarball into dest_dir."""

    @abstractmethod
    def machine(self) -> str: ...

    @abstractmethod
    def primary_ip(self) -> str | None: ...

    @abstractmethod
    def invoking_user(self) -> str: ...

    @abstractmethod
    def user_home(self, user: str) -> Path: ...


def lookup_user(user: str) -> pwd.struct_passwd:
    try:
        return pwd.getpwnam(user)
    except KeyError:
        raise HostError(f"Unknown user: {user}", "No passwd entry; check SUDO_USER")


class SystemHost(HostEnvironment):
    """The real machine this process is running on."""

    def is_root(self) -> bool:
        return os.geteuid() == 0

    def run(self, cmd, input=None, env=None, capture=False):
        logger.debug(f"Running: {' '.join(cmd)}")
        run_env = None
        if env:
            run_env = {**os.environ, **env}

        text = not isinstance(input, bytes)
        try:
            result = subprocess.run(
                cmd,
                input=input,
                env=run_env,
                stdout=subprocess.PIPE if capture else None,
                stderr=subprocess.PIPE if capture else None,
                text=text,
                check=False,
            )
        except FileNotFoundError:
            logger.error(f"Command not found: {cmd[0]}")
            raise CommandError(cmd, 127, f"{cmd[0]}: command not found")

        if result.returncode != 0:
            stderr = result.stderr or ""
            if isinstance(stderr, bytes):
                stderr = stderr.decode(errors="replace")
            logger.error(f"Command failed with return code {result.returncode}: {' '.join(cmd)}")
            raise CommandError(cmd, result.returncode, stderr)

        if not capture:
            return ""
        stdout = result.stdout
        if isinstance(stdout, bytes):
            stdout = stdout.decode(errors="replace")
        return stdout

    def run_shell(self, command):
        logger.debug(f"Running shell command: {command}")
        result = subprocess.run(command, shell=True, check=False)
        if result.returncode != 0:
            logger.error(f"Shell command failed with return code {result.returncode}")
            raise CommandError(command, result.returncode)

    def read_text(self, path, default=None):
        try:
            return Path(path).read_text()
        except OSError as e:
            if isinstance(e, FileNotFoundError) and default is not None:
                return default
            raise HostError(f"Cannot read {path}", str(e))

    def write_text(self, path, content, append=False):
        logger.debug(f"Writing {path}")
        try:
            with open(path, "a" if append else "w") as f:
                f.write(content)
        except OSError as e:
            logger.error(f"Failed to write {path}: {e}")
            raise HostError(f"Cannot write {path}", str(e))

    def make_dirs(self, path):
        try:
            Path(path).mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise HostError(f"Cannot create directory {path}", str(e))

    def copy_file(self, src, dst):
        logger.debug(f"Copying {src} -> {dst}")
        try:
            shutil.copyfile(src, dst)
        except OSError as e:
            logger.error(f"Failed to copy {src} -> {dst}: {e}")
            raise HostError(f"Cannot copy {src} to {dst}", str(e))

    def chown(self, path, user):
        entry = lookup_user(user)
        try:
            os.chown(path, entry.pw_uid, entry.pw_gid)
        except OSError as e:
            raise HostError(f"Cannot change owner of {path} to {user}", str(e))

    def fetch(self, url):
        logger.debug(f"Fetching {url}")
        try:
            response = requests.get(url, timeout=FETCH_TIMEOUT)
            response.raise_for_status()
        except requests.RequestException as e:
            logger.error(f"Failed to fetch {url}: {e}")
            raise DownloadError(f"Failed to fetch {url}", str(e))
        return response.content

    def extract_member(self, archive, member, dest_dir):
        logger.debug(f"Extracting {member} into {dest_dir}")
        try:
            with tarfile.open(fileobj=io.BytesIO(archive), mode="r:gz") as tar:
                tar.extract(member, path=dest_dir, filter="data")
        except (tarfile.TarError, KeyError) as e:
            raise DownloadError(f"Failed to extract {member} from archive", str(e))

    def machine(self):
        return platform.machine()

    def primary_ip(self):
        try:
            output = self.run(["ip", "-4", "route", "get", ROUTE_PROBE_ADDRESS], capture=True)
        except CommandError as e:
            logger.warning(f"Could not determine primary IP: {e.message}")
            return None
        return parse_route_source(output)

    def invoking_user(self):
        return os.environ.get("SUDO_USER") or "root"

    def user_home(self, user):
        return Path(lookup_user(user).pw_dir)


class DryRunHost(SystemHost):
    """Prints every mutation instead of performing it.

    Reads (files, route table, HTTPS fetches) still hit the real system so
    the printed plan reflects this host.
    """

    def __init__(self, console: Console | None = None):
        self.console = console or Console()

    def _show(self, text: str) -> None:
        self.console.print(f"[dim]\\[dry-run][/dim] {escape(text)}", highlight=False)

    def is_root(self):
        if not super().is_root():
            self._show("not running as root; continuing anyway")
        return True

    def run(self, cmd, input=None, env=None, capture=False):
        if cmd[:2] == ["ip", "-4"]:
            return super().run(cmd, input=input, env=env, capture=capture)
        prefix = " ".join(f"{k}={v}" for k, v in (env or {}).items())
        self._show(f"{prefix + ' ' if prefix else ''}{' '.join(cmd)}")
        return ""

    def run_shell(self, command):
        self._show(command)

    def read_text(self, path, default=None):
        try:
            return super().read_text(path, default)
        except HostError:
            return ""

    def write_text(self, path, content, append=False):
        action = "append to" if append else "write"
        self._show(f"{action} {path}:\n{content.rstrip()}")

    def make_dirs(self, path):
        self._show(f"mkdir -p {path}")

    def copy_file(self, src, dst):
        self._show(f"cp {src} {dst}")

    def chown(self, path, user):
        self._show(f"chown {user}: {path}")

    def extract_member(self, archive, member, dest_dir):
        self._show(f"extract {member} into {dest_dir}")

    def user_home(self, user):
        try:
            return super().user_home(user)
        except HostError:
            return Path("~").expanduser()
