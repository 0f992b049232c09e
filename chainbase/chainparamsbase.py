"""
Base chain parameters

The base parameters of a chain are the ones needed before the full chain parameters exist: the data directory suffix
and the default port. This module holds:
    -The chain selection options, registered on an ArgsManager
    -The factory mapping a chain name to its BaseChainParams
    -The ChainContext holding the selected parameters, plus the process-wide accessors built on one shared context
"""
import threading
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Optional

from chainbase.args import ArgFlags, ArgsManager, OptionsCategory, g_args
from chainbase.core import CHAIN, PORTS, ChainParamsError, ChainParamsNotSelectedError, get_logger

__all__ = ["BaseChainParams", "ChainContext", "setup_chain_params_base_options", "create_base_chain_params",
           "select_base_params", "select_base_params_from_args", "base_params", "base_chain_context"]

logger = get_logger(__name__)

# Reserved chains in match order: chain name -> (data_dir, default_port)
RESERVED_CHAINS = {
    CHAIN.MAIN: (CHAIN.MAIN_DATA_DIR, PORTS.MAIN),
    CHAIN.TESTNET: (CHAIN.TESTNET_DATA_DIR, PORTS.TESTNET),
    CHAIN.REGTEST: (CHAIN.REGTEST_DATA_DIR, PORTS.REGTEST),
    CHAIN.SIGNET: (CHAIN.SIGNET_DATA_DIR, PORTS.SIGNET),
}


@dataclass(frozen=True, slots=True)
class BaseChainParams:
    """Immutable base chain parameters."""
    data_dir: str
    default_port: int

    def __post_init__(self):
        if not 0 <= self.default_port <= PORTS.MAX_PORT:
            raise ChainParamsError(f"Default port {self.default_port} out of range")

    def to_dict(self) -> dict:
        return asdict(self)


def setup_chain_params_base_options(args: ArgsManager = g_args) -> None:
    """
    Register the chain selection options on the given ArgsManager
    """
    args.add_arg("-chain=<chain>",
                 "Use the chain <chain> (default: main). Reserved values: main, test, signet, regtest. With any other "
                 "value, a custom chain is used. All regtest-only options are available in custom chains too.",
                 ArgFlags.ALLOW_ANY, OptionsCategory.CHAINPARAMS)
    args.add_arg("-regtest",
                 "Enter regression test mode, which uses a special chain in which blocks can be solved instantly. "
                 "This is intended for regression testing tools and app development. Equivalent to -chain=regtest.",
                 ArgFlags.ALLOW_ANY | ArgFlags.DEBUG_ONLY, OptionsCategory.CHAINPARAMS)
    args.add_arg("-segwitheight=<n>", "Set the activation height of segwit. -1 to disable. (regtest-only)",
                 ArgFlags.ALLOW_ANY | ArgFlags.DEBUG_ONLY, OptionsCategory.DEBUG_TEST)
    args.add_arg("-testnet", "Use the test chain. Equivalent to -chain=test.",
                 ArgFlags.ALLOW_ANY, OptionsCategory.CHAINPARAMS)
    args.add_arg("-vbparams=deployment:start:end",
                 "Use given start/end times for specified version bits deployment (regtest-only)",
                 ArgFlags.ALLOW_ANY | ArgFlags.DEBUG_ONLY, OptionsCategory.CHAINPARAMS)
    args.add_arg("-signet",
                 "Use the signet chain. Note that the network is defined by the signet_blockscript parameter",
                 ArgFlags.ALLOW_ANY, OptionsCategory.CHAINPARAMS)
    args.add_arg("-signet_blockscript",
                 "Blocks must satisfy the given script to be considered valid (only for signet networks)",
                 ArgFlags.ALLOW_STRING, OptionsCategory.CHAINPARAMS)
    args.add_arg("-signet_enforcescript",
                 "Blocks must satisfy the given script to be considered valid (this replaces -signet_blockscript, "
                 "and is used for opt-in-reorg mode)",
                 ArgFlags.ALLOW_STRING, OptionsCategory.CHAINPARAMS)
    args.add_arg("-is_test_chain",
                 "Whether it's allowed to set -acceptnonstdtxn=0 for this chain or not. Default: 1 (regtest-only)",
                 ArgFlags.ALLOW_ANY | ArgFlags.DEBUG_ONLY, OptionsCategory.CHAINPARAMS)


def create_base_chain_params(chain: str) -> BaseChainParams:
    """
    Create the base parameters for the given chain name.

    The reserved names map to their own data directory and port. Any other name, including the empty string, is a
    custom chain: its data directory is the name itself and it uses the custom chain port.
    """
    if chain in RESERVED_CHAINS:
        data_dir, default_port = RESERVED_CHAINS[chain]
        return BaseChainParams(data_dir, default_port)
    return BaseChainParams(chain, PORTS.CUSTOM)


class ChainContext:
    """
    Holds the base chain parameters selected for this process.

    Selection normally happens once at startup and is read many times afterwards. Selecting again replaces the
    parameters. Access is guarded by a lock, so a reader on another thread never sees a partial selection.
    """

    def __init__(self, args: Optional[ArgsManager] = None):
        """
        Args:
            args: ArgsManager notified of the selected chain, so that its lookups use that chain's config section
        """
        self.args = args
        self._lock = threading.Lock()
        self._params: Optional[BaseChainParams] = None
        self._chain: Optional[str] = None

    def select(self, chain: str, args: Optional[ArgsManager] = None) -> BaseChainParams:
        """
        Select the chain and store its base parameters, replacing any earlier selection.

        Args:
            chain: The chain name
            args: ArgsManager to notify instead of the one given at construction

        Returns:
            The newly selected BaseChainParams
        """
        config_args = args or self.args
        # The ArgsManager network always matches the stored chain
        with self._lock:
            params = create_base_chain_params(chain)
            previous = self._chain
            self._params = params
            self._chain = chain
            if config_args is not None:
                config_args.select_config_network(chain)

        if previous is not None:
            logger.warning(f"Base chain parameters re-selected: {previous!r} -> {chain!r}")
        logger.info(f"Selected chain {chain!r}: data_dir={params.data_dir!r}, default_port={params.default_port}")
        return params

    @property
    def params(self) -> BaseChainParams:
        with self._lock:
            params = self._params
        if params is None:
            logger.error("Base chain parameters read before a chain was selected")
            raise ChainParamsNotSelectedError("No chain selected. Call select() before reading the chain parameters")
        return params

    @property
    def chain(self) -> Optional[str]:
        """The last selected chain name, None before selection"""
        with self._lock:
            return self._chain

    @property
    def is_selected(self) -> bool:
        with self._lock:
            return self._params is not None

    def net_data_dir(self, base_dir: Path) -> Path:
        """The chain specific data directory. For main this is the base directory itself."""
        return Path(base_dir) / self.params.data_dir

    def reset(self) -> None:
        """Clear the selection"""
        with self._lock:
            self._params = None
            self._chain = None


# --- PROCESS-WIDE ACCESS --- #

_chain_context = ChainContext(g_args)


def base_chain_context() -> ChainContext:
    """The process-wide ChainContext, for components that take the context explicitly"""
    return _chain_context


def select_base_params(chain: str) -> None:
    """Select the process-wide base chain parameters and scope the global ArgsManager to the chain"""
    _chain_context.select(chain)


def select_base_params_from_args(args: ArgsManager = g_args) -> str:
    """
    Resolve the chain from the parsed chain selection options and select it.

    Raises:
        ArgsManagerError: If more than one of -regtest, -signet, -testnet and -chain is given

    Returns:
        The selected chain name
    """
    chain = args.get_chain_name()
    _chain_context.select(chain, args)
    return chain


def base_params() -> BaseChainParams:
    """
    The process-wide base chain parameters.

    Raises:
        ChainParamsNotSelectedError: If no chain has been selected yet
    """
    return _chain_context.params
