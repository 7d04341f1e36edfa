"""Pytest configuration and shared fixtures."""

import hashlib
import io
from pathlib import Path

import pytest
from hypothesis import Verbosity, settings
from rich.console import Console

from kube_bootstrap.config import NodeConfig
from kube_bootstrap.context import BootstrapContext
from kube_bootstrap.exceptions import CommandError, HostError
from kube_bootstrap.host import HostEnvironment
from kube_bootstrap.prompts import InputProvider

# Configure Hypothesis for property-based testing
settings.register_profile("default", max_examples=100, verbosity=Verbosity.normal)
settings.register_profile("ci", max_examples=1000, verbosity=Verbosity.verbose)
settings.register_profile("dev", max_examples=10, verbosity=Verbosity.verbose)

# Load the default profile
settings.load_profile("default")

CILIUM_VERSION = "v0.16.22"
CILIUM_ARCHIVE = b"fake cilium tarball"
SAMPLE_FSTAB = (
    "UUID=1234 / ext4 defaults 0 1\n"
    "/swap.img none swap sw 0 0\n"
    "#/old.swap none swap sw 0 0\n"
)


class RecordingHost(HostEnvironment):
    """In-memory host that records every interaction."""

    def __init__(self):
        self.root = True
        self.commands: list[list[str]] = []
        self.shell_commands: list[str] = []
        self.inputs: dict[tuple, object] = {}
        self.envs: dict[tuple, dict] = {}
        self.outputs: dict[tuple, str] = {
            ("containerd", "config", "default"): (
                "[plugins.runc.options]\n  SystemdCgroup = false\n"
            ),
        }
        self.failures: dict[tuple, int] = {}
        self.files: dict[Path, str] = {Path("/etc/fstab"): SAMPLE_FSTAB}
        self.dirs: list[Path] = []
        self.copies: list[tuple[Path, Path]] = []
        self.chowns: list[tuple[Path, str]] = []
        self.urls: dict[str, bytes] = {}
        self.fetched: list[str] = []
        self.extracted: list[tuple[str, Path]] = []
        self.machine_name = "x86_64"
        self.ip = "192.168.1.50"
        self.user = "alice"

    def is_root(self):
        return self.root

    def run(self, cmd, input=None, env=None, capture=False):
        key = tuple(cmd)
        self.commands.append(list(cmd))
        if input is not None:
            self.inputs[key] = input
        if env:
            self.envs[key] = env
        if key in self.failures:
            raise CommandError(cmd, self.failures[key], "simulated failure")
        return self.outputs.get(key, "") if capture else ""

    def run_shell(self, command):
        self.shell_commands.append(command)

    def read_text(self, path, default=None):
        path = Path(path)
        if path in self.files:
            return self.files[path]
        if default is not None:
            return default
        raise HostError(f"Cannot read {path}", "No such file or directory")

    def write_text(self, path, content, append=False):
        path = Path(path)
        if append:
            content = self.files.get(path, "") + content
        self.files[path] = content

    def make_dirs(self, path):
        self.dirs.append(Path(path))

    def copy_file(self, src, dst):
        self.copies.append((Path(src), Path(dst)))

    def chown(self, path, user):
        self.chowns.append((Path(path), user))

    def fetch(self, url):
        self.fetched.append(url)
        return self.urls.get(url, b"")

    def extract_member(self, archive, member, dest_dir):
        self.extracted.append((member, Path(dest_dir)))

    def machine(self):
        return self.machine_name

    def primary_ip(self):
        return self.ip

    def invoking_user(self):
        return self.user

    def user_home(self, user):
        return Path("/home") / user

    def ran(self, *prefix: str) -> bool:
        """True if any recorded command starts with prefix."""
        return any(tuple(cmd[: len(prefix)]) == prefix for cmd in self.commands)


class ScriptedPrompter(InputProvider):
    """Returns scripted answers in order; empty answers fall back to the default."""

    def __init__(self, answers=None):
        self.answers = list(answers or [])
        self.asked: list[tuple[str, str | None]] = []

    def prompt(self, name, default=None):
        self.asked.append((name, default))
        if not self.answers:
            raise AssertionError(f"Unexpected prompt: {name}")
        answer = self.answers.pop(0)
        if not answer and default is not None:
            return default
        return answer


def cilium_urls(config: NodeConfig, arch: str = "amd64", archive: bytes = CILIUM_ARCHIVE):
    """URL -> payload map for a cilium-cli release."""
    name = f"cilium-linux-{arch}.tar.gz"
    base = f"{config.cilium_release_url}/{CILIUM_VERSION}"
    digest = hashlib.sha256(archive).hexdigest()
    return {
        config.cilium_stable_url: f"{CILIUM_VERSION}\n".encode(),
        f"{base}/{name}": archive,
        f"{base}/{name}.sha256sum": f"{digest}  {name}\n".encode(),
    }


@pytest.fixture
def node_config():
    return NodeConfig()


@pytest.fixture
def host(node_config):
    fake = RecordingHost()
    fake.urls.update(cilium_urls(node_config))
    fake.urls[node_config.repository_key_url] = b"-----BEGIN PGP PUBLIC KEY BLOCK-----"
    return fake


@pytest.fixture
def make_context(host, node_config):
    """Build a BootstrapContext around the fake host with scripted answers."""

    def _make(*answers: str) -> BootstrapContext:
        return BootstrapContext(
            host=host,
            config=node_config,
            prompter=ScriptedPrompter(answers),
            console=Console(record=True, width=120, file=io.StringIO()),
        )

    return _make
