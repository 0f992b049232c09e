"""
The ArgsManager - registry of the known command-line/config options and the values given for them

Options are registered with a help text, value flags and a category. Values come from the command line
(parse_parameters) and from config text (read_config_string). Once a network is selected, lookups first check the
section for that network, so that e.g. "regtest.port=1234" or a [regtest] config section only applies on regtest.
"""
import re
import textwrap
import threading
from dataclasses import dataclass
from enum import Enum, IntFlag
from pathlib import Path
from typing import Optional

from chainbase.core import CHAIN, ArgsManagerError, get_logger

__all__ = ["ArgFlags", "OptionsCategory", "ArgOption", "ArgsManager", "g_args"]

logger = get_logger(__name__)

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")

HELP_WIDTH = 79
HELP_INDENT = 7


class ArgFlags(IntFlag):
    NONE = 0x00
    ALLOW_BOOL = 0x01
    ALLOW_INT = 0x02
    ALLOW_STRING = 0x04
    ALLOW_ANY = ALLOW_BOOL | ALLOW_INT | ALLOW_STRING
    DEBUG_ONLY = 0x100
    NETWORK_ONLY = 0x200
    SENSITIVE = 0x400


class OptionsCategory(Enum):
    """Help section for an option. Definition order is the order of the help message."""
    OPTIONS = "Options"
    CONNECTION = "Connection options"
    WALLET = "Wallet options"
    WALLET_DEBUG_TEST = "Wallet debugging/testing options"
    ZMQ = "ZeroMQ notification options"
    DEBUG_TEST = "Debugging/Testing options"
    CHAINPARAMS = "Chain selection options"
    NODE_RELAY = "Node relay options"
    BLOCK_CREATION = "Block creation options"
    RPC = "RPC server options"
    COMMANDS = "Commands"
    HIDDEN = "Hidden options"


@dataclass(frozen=True, slots=True)
class ArgOption:
    """A registered option description."""
    name: str
    help_param: str
    help_text: str
    flags: ArgFlags
    category: OptionsCategory

    @property
    def debug_only(self) -> bool:
        return bool(self.flags & ArgFlags.DEBUG_ONLY)


def _atoi(value: str) -> int:
    """Integer value of the leading digits, 0 if there are none"""
    match = _LEADING_INT.match(value)
    return int(match.group(1)) if match else 0


def _interpret_bool(value: str) -> bool:
    """An empty value is true (e.g. "-regtest"), otherwise the value is read as an integer"""
    if value == "":
        return True
    return _atoi(value) != 0


class ArgsManager:
    """
    Holds option descriptions and parsed values.

    Values are kept per section: the empty section "" for top-level values and one section per network name. Each
    option keeps a list of values, with None marking a negated option (e.g. "-nolisten").
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._options: dict[str, ArgOption] = {}
        self._command_line: dict[str, dict[str, list]] = {}
        self._config: dict[str, dict[str, list]] = {}
        self._network: Optional[str] = None

    # --- REGISTRATION --- #

    def add_arg(self, name: str, help_text: str, flags: ArgFlags, category: OptionsCategory) -> None:
        """
        Register an option. The name may carry a help parameter, e.g. "-chain=<chain>".
        Registering a name again replaces its description.
        """
        if not name.startswith("-"):
            raise ArgsManagerError(f"Option name must start with '-': {name}")
        arg_name, sep, param = name.partition("=")
        option = ArgOption(arg_name, sep + param, help_text, ArgFlags(flags), category)
        with self._lock:
            self._options[arg_name] = option

    def get_arg_flags(self, name: str) -> Optional[ArgFlags]:
        """Flags of a registered option, None if unknown"""
        with self._lock:
            option = self._options.get(name)
        return option.flags if option else None

    def get_registered_args(self, category: Optional[OptionsCategory] = None) -> list[ArgOption]:
        """All registered options, optionally restricted to one category, sorted by name"""
        with self._lock:
            options = list(self._options.values())
        if category is not None:
            options = [o for o in options if o.category is category]
        return sorted(options, key=lambda o: o.name)

    # --- PARSING --- #

    def parse_parameters(self, argv: list[str]) -> list[str]:
        """
        Parse command-line arguments, replacing any previously parsed ones.

        Parsing stops at the first argument not starting with '-'; that argument and all following ones are returned
        as positional commands. If an argument is invalid, the previously parsed arguments are kept.
        """
        command_line: dict[str, dict[str, list]] = {}
        commands: list[str] = []
        for index, arg in enumerate(argv):
            if not arg.startswith("-") or arg in ("-", "--"):
                commands = list(argv[index:])
                break
            key, sep, value = arg.partition("=")
            if key.startswith("--"):
                key = key[1:]
            section, name = self._split_section(key)
            name, parsed = self._interpret(name, value, has_value=bool(sep))
            self._store(command_line, section, name, parsed)

        with self._lock:
            self._command_line = command_line
        return commands

    def read_config_string(self, text: str) -> None:
        """
        Read config text, replacing any previously read config.

        Lines are "key=value" without a leading '-'. A "[name]" header starts the section for that network and
        "name.key=value" sets a single value in a section. Everything after a '#' is a comment.
        """
        config: dict[str, dict[str, list]] = {}
        section = ""
        for line_no, raw_line in enumerate(text.splitlines(), start=1):
            line = raw_line.split("#", 1)[0].strip()
            if not line:
                continue
            if line.startswith("[") and line.endswith("]"):
                section = line[1:-1].strip()
                continue
            if line.startswith("-"):
                raise ArgsManagerError(
                    f"parse error on line {line_no}: {line}, options in configuration file must be specified without "
                    f"leading -")
            key, sep, value = line.partition("=")
            if not sep:
                raise ArgsManagerError(f"parse error on line {line_no}: {line}")
            key_section, name = self._split_section("-" + key.strip())
            name, parsed = self._interpret(name, value.strip(), has_value=True)
            self._store(config, key_section or section, name, parsed)

        with self._lock:
            self._config = config

    def read_config_file(self, path: Path) -> None:
        """Read a config file from disk"""
        self.read_config_string(Path(path).read_text())

    # --- NETWORK SCOPING --- #

    def select_config_network(self, network: str) -> None:
        """Scope subsequent lookups to the sections of the given network"""
        with self._lock:
            self._network = network
        logger.debug(f"Config network set to {network!r}")

    @property
    def network(self) -> Optional[str]:
        with self._lock:
            return self._network

    # --- LOOKUPS --- #

    def get_arg(self, name: str, default: str) -> str:
        """Last value given for the option, "0" if negated, default if unset"""
        values = self._get_setting(name)
        if not values:
            return default
        return "0" if values[-1] is None else values[-1]

    def get_int_arg(self, name: str, default: int) -> int:
        values = self._get_setting(name)
        if not values:
            return default
        return 0 if values[-1] is None else _atoi(values[-1])

    def get_bool_arg(self, name: str, default: bool) -> bool:
        values = self._get_setting(name)
        if not values:
            return default
        return False if values[-1] is None else _interpret_bool(values[-1])

    def get_args(self, name: str) -> list[str]:
        """All values given for a multi-valued option"""
        values = self._get_setting(name) or []
        return [v for v in values if v is not None]

    def is_arg_set(self, name: str) -> bool:
        """True if the option was given, negated or not"""
        return self._get_setting(name) is not None

    def is_arg_negated(self, name: str) -> bool:
        values = self._get_setting(name)
        return bool(values) and values[-1] is None

    def get_chain_name(self) -> str:
        """
        Resolve the chain name from -regtest, -signet, -testnet and -chain.

        Only top-level values are consulted, since no network has been selected yet. At most one of the four may be
        given.

        Returns:
            The reserved chain name for a shortcut, otherwise the -chain value (default "main")
        """
        with self._lock:
            regtest = self._get_top_level_bool("-regtest")
            signet = self._get_top_level_bool("-signet")
            testnet = self._get_top_level_bool("-testnet")
            chain_values = self._get_top_level("-chain")

        if sum([chain_values is not None, regtest, signet, testnet]) > 1:
            raise ArgsManagerError("Invalid combination of -regtest, -signet, -testnet and -chain. Can use at most one.")
        if regtest:
            return CHAIN.REGTEST
        if signet:
            return CHAIN.SIGNET
        if testnet:
            return CHAIN.TESTNET
        if chain_values:
            return "0" if chain_values[-1] is None else chain_values[-1]
        return CHAIN.MAIN

    # --- HELP --- #

    def get_help_message(self, show_debug: bool = False) -> str:
        """Help text for all registered options, grouped by category. Debug-only options need show_debug."""
        sections = []
        for category in OptionsCategory:
            if category is OptionsCategory.HIDDEN:
                continue
            options = [o for o in self.get_registered_args(category) if show_debug or not o.debug_only]
            if not options:
                continue
            lines = [f"{category.value}:", ""]
            for option in options:
                lines.append(f"  {option.name}{option.help_param}")
                lines.append(textwrap.fill(option.help_text, width=HELP_WIDTH, initial_indent=" " * HELP_INDENT,
                                           subsequent_indent=" " * HELP_INDENT, break_on_hyphens=False))
                lines.append("")
            sections.append("\n".join(lines))
        return "\n".join(sections)

    def clear(self) -> None:
        """Drop all registered options, values and the selected network"""
        with self._lock:
            self._options = {}
            self._command_line = {}
            self._config = {}
            self._network = None

    # --- INTERNAL --- #

    @staticmethod
    def _split_section(key: str) -> tuple[str, str]:
        """Split "-section.name" into ("section", "-name"). Top-level keys get the empty section."""
        bare = key.lstrip("-")
        section, sep, name = bare.partition(".")
        if not sep:
            return "", "-" + bare
        return section, "-" + name

    def _interpret(self, name: str, value: str, has_value: bool) -> tuple[str, Optional[str]]:
        """
        Resolve negation and validate the option against its flags.

        Returns:
            The registered option name and its value, None for a negated option
        """
        flags = self.get_arg_flags(name)
        if flags is None and name.startswith("-no"):
            positive = "-" + name[3:]
            if self.get_arg_flags(positive) is not None:
                if _interpret_bool(value):
                    return positive, None
                logger.warning(f"Parsed potentially confusing double-negative {name}={value}")
                return positive, "1"

        if flags is None:
            raise ArgsManagerError(f"Invalid parameter {name}")

        # Boolean-only options still take "0"/"1" style values, e.g. "listen=1" in a config file
        if has_value and not flags & ArgFlags.ALLOW_STRING and _LEADING_INT.fullmatch(value) is None:
            if flags & ArgFlags.ALLOW_INT:
                raise ArgsManagerError(f"Can not set {name} value to {value!r}: it only accepts an integer")
            raise ArgsManagerError(f"Can not set {name} value to {value!r}: it only accepts a boolean")
        return name, value

    @staticmethod
    def _store(store: dict[str, dict[str, list]], section: str, name: str, value: Optional[str]) -> None:
        values = store.setdefault(section, {}).setdefault(name, [])
        # Negation drops everything given before it
        if value is None:
            values.clear()
        values.append(value)

    def _use_default_section(self, name: str) -> bool:
        flags = self.get_arg_flags(name) or ArgFlags.NONE
        return self._network in (None, CHAIN.MAIN) or not flags & ArgFlags.NETWORK_ONLY

    def _get_setting(self, name: str) -> Optional[list]:
        with self._lock:
            network = self._network
            sources = []
            if network is not None:
                sources.append(self._command_line.get(network, {}))
            sources.append(self._command_line.get("", {}))
            if network is not None:
                sources.append(self._config.get(network, {}))
            if self._use_default_section(name):
                sources.append(self._config.get("", {}))

            for source in sources:
                if name in source:
                    return list(source[name])
        return None

    def _get_top_level(self, name: str) -> Optional[list]:
        for store in (self._command_line, self._config):
            values = store.get("", {}).get(name)
            if values is not None:
                return list(values)
        return None

    def _get_top_level_bool(self, name: str) -> bool:
        values = self._get_top_level(name)
        if not values or values[-1] is None:
            return False
        return _interpret_bool(values[-1])


g_args = ArgsManager()
