"""
Chain-specific configuration for the v3 analytics engine.

Every supported deployment is described by a ChainSettings record: the
factory, the stablecoin/wrapped-native reference pool used to price the
native asset in USD, the whitelist of trusted pricing tokens and the
data-quality skip lists.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List, Optional

from .base import BaseConfig
from .static_tokens import (
    STATIC_TOKEN_DEFINITIONS_BASE,
    STATIC_TOKEN_DEFINITIONS_ETH,
    StaticTokenDefinition,
)


ETH_MAINNET_ID = 1
OPTIMISM_MAINNET_ID = 10
BSC_MAINNET_ID = 56
MATIC_MAINNET_ID = 137
BASE_MAINNET_ID = 8453
ARBITRUM_MAINNET_ID = 42161
CELO_MAINNET_ID = 42220
AVALANCHE_MAINNET_ID = 43114
BLAST_MAINNET_ID = 81457


@dataclass
class ChainSettings:
    """Per-chain pricing and indexing settings."""
    chain_id: int
    name: str
    factory_address: str
    stablecoin_wrapped_native_pool_address: str
    stablecoin_is_token0: bool
    wrapped_native_address: str
    minimum_native_locked: Decimal
    stablecoin_addresses: List[str] = field(default_factory=list)
    whitelist_tokens: List[str] = field(default_factory=list)
    token_overrides: List[StaticTokenDefinition] = field(default_factory=list)
    pools_to_skip: List[str] = field(default_factory=list)
    rpc_url: Optional[str] = None

    def __post_init__(self):
        self.factory_address = self.factory_address.lower()
        self.stablecoin_wrapped_native_pool_address = self.stablecoin_wrapped_native_pool_address.lower()
        self.wrapped_native_address = self.wrapped_native_address.lower()
        self.stablecoin_addresses = [a.lower() for a in self.stablecoin_addresses]
        self.whitelist_tokens = [a.lower() for a in self.whitelist_tokens]
        self.pools_to_skip = [a.lower() for a in self.pools_to_skip]
        if not isinstance(self.minimum_native_locked, Decimal):
            self.minimum_native_locked = Decimal(str(self.minimum_native_locked))

    def is_whitelisted(self, token_address: str) -> bool:
        return token_address.lower() in self.whitelist_tokens


@dataclass
class ChainConfig(BaseConfig):
    """Chain-specific configuration for the supported deployments."""

    DEFAULT_CHAIN_ID: int = BaseConfig.get_env_int("DEFAULT_CHAIN_ID", ETH_MAINNET_ID)

    # Chain-specific RPC URLs
    ETHEREUM_RPC_URL: str = BaseConfig.get_env("ETHEREUM_RPC_URL", "https://eth.llamarpc.com")
    OPTIMISM_RPC_URL: str = BaseConfig.get_env("OPTIMISM_RPC_URL", "https://mainnet.optimism.io")
    BSC_RPC_URL: str = BaseConfig.get_env("BSC_RPC_URL", "https://bsc-dataseed.binance.org")
    POLYGON_RPC_URL: str = BaseConfig.get_env("POLYGON_RPC_URL", "https://polygon-rpc.com")
    BASE_RPC_URL: str = BaseConfig.get_env("BASE_RPC_URL", "https://mainnet.base.org")
    ARBITRUM_RPC_URL: str = BaseConfig.get_env("ARBITRUM_RPC_URL", "https://arb1.arbitrum.io/rpc")
    CELO_RPC_URL: str = BaseConfig.get_env("CELO_RPC_URL", "https://forno.celo.org")
    AVALANCHE_RPC_URL: str = BaseConfig.get_env(
        "AVALANCHE_RPC_URL", "https://api.avax.network/ext/bc/C/rpc"
    )
    BLAST_RPC_URL: str = BaseConfig.get_env("BLAST_RPC_URL", "https://rpc.blast.io")

    # Chains to index; empty means all supported chains
    ENABLED_CHAIN_IDS: List[str] = field(
        default_factory=lambda: BaseConfig.get_env_list("ENABLED_CHAIN_IDS")
    )

    def __post_init__(self):
        super().__post_init__()
        self._settings = self._build_settings()

    def _build_settings(self) -> Dict[int, ChainSettings]:
        return {
            ETH_MAINNET_ID: ChainSettings(
                chain_id=ETH_MAINNET_ID,
                name="ethereum",
                factory_address="0x1F98431c8aD98523631AE4a59f267346ea31F984",
                # USDC-WETH 0.3%
                stablecoin_wrapped_native_pool_address="0x8ad599c3a0ff1de082011efddc58f1908eb6e6d8",
                stablecoin_is_token0=True,
                wrapped_native_address="0xc02aaa39b223fe8d0a0e5c4f27ead9083c756cc2",
                minimum_native_locked=Decimal("20"),
                stablecoin_addresses=[
                    "0x6b175474e89094c44da98b954eedeac495271d0f",  # DAI
                    "0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48",  # USDC
                    "0xdac17f958d2ee523a2206206994597c13d831ec7",  # USDT
                    "0x0000000000085d4780b73119b644ae5ecd22b376",  # TUSD
                    "0x956f47f50a910163d8bf957cf5846d573e7f87ca",  # FEI
                ],
                whitelist_tokens=[
                    "0xc02aaa39b223fe8d0a0e5c4f27ead9083c756cc2",  # WETH
                    "0x6b175474e89094c44da98b954eedeac495271d0f",  # DAI
                    "0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48",  # USDC
                    "0xdac17f958d2ee523a2206206994597c13d831ec7",  # USDT
                    "0x0000000000085d4780b73119b644ae5ecd22b376",  # TUSD
                    "0x2260fac5e5542a773aa44fbcfedf7c193bc2c599",  # WBTC
                    "0x5d3a536e4d6dbd6114cc1ead35777bab948e3643",  # cDAI
                    "0x39aa39c021dfbae8fac545936693ac917d5e7563",  # cUSDC
                    "0x86fadb80d8d2cff3c3680819e4da99c10232ba0f",  # EBASE
                    "0x57ab1ec28d129707052df4df418d58a2d46d5f51",  # sUSD
                    "0x9f8f72aa9304c8b593d555f12ef6589cc3a579a2",  # MKR
                    "0xc00e94cb662c3520282e6f5717214004a7f26888",  # COMP
                    "0x514910771af9ca656af840dff83e8264ecf986ca",  # LINK
                    "0xc011a73ee8576fb46f5e1c5751ca3b9fe0af2a6f",  # SNX
                    "0x0bc529c00c6401aef6d220be8c6ea1667f6ad93e",  # YFI
                    "0x111111111117dc0aa78b770fa6a738034120c302",  # 1INCH
                    "0xdf5e0e81dff6faf3a7e52ba697820c5e32d806a8",  # yCurv
                    "0x956f47f50a910163d8bf957cf5846d573e7f87ca",  # FEI
                    "0x7d1afa7b718fb893db30a3abc0cfc608aacfebb0",  # MATIC
                    "0x7fc66500c84a76ad7e9c93437bfc5ac33e2ddae9",  # AAVE
                    "0xfe2e637202056d30016725477c5da089ab0a043a",  # sETH2
                ],
                token_overrides=STATIC_TOKEN_DEFINITIONS_ETH,
                pools_to_skip=["0x8fe8d9bb8eeba3ed688069c3d6b556c9ca258248"],
                rpc_url=self.ETHEREUM_RPC_URL,
            ),
            OPTIMISM_MAINNET_ID: ChainSettings(
                chain_id=OPTIMISM_MAINNET_ID,
                name="optimism",
                factory_address="0x1F98431c8aD98523631AE4a59f267346ea31F984",
                # DAI-WETH 0.3%
                stablecoin_wrapped_native_pool_address="0x03af20bdaaffb4cc0a521796a223f7d85e2aac31",
                stablecoin_is_token0=False,
                wrapped_native_address="0x4200000000000000000000000000000000000006",
                minimum_native_locked=Decimal("10"),
                stablecoin_addresses=[
                    "0xda10009cbd5d07dd0cecc66161fc93d7c9000da1",  # DAI
                    "0x7f5c764cbc14f9669b88837ca1490cca17c31607",  # USDC
                    "0x94b008aa00579c1307b0ef2c499ad98a8ce58e58",  # USDT
                ],
                whitelist_tokens=[
                    "0x4200000000000000000000000000000000000006",  # WETH
                    "0xda10009cbd5d07dd0cecc66161fc93d7c9000da1",  # DAI
                    "0x7f5c764cbc14f9669b88837ca1490cca17c31607",  # USDC
                    "0x94b008aa00579c1307b0ef2c499ad98a8ce58e58",  # USDT
                    "0x4200000000000000000000000000000000000042",  # OP
                    "0x9e1028f5f1d5ede59748ffcee5532509976840e0",  # PERP
                    "0x50c5725949a6f0c72e6c4a641f24049a917db0cb",  # LYRA
                    "0x68f180fcce6836688e9084f035309e29bf0a2095",  # WBTC
                ],
                token_overrides=[
                    StaticTokenDefinition(
                        "0x82af49447d8a07e3bd95bd0d56f35241523fbab1", "WETH", "Wrapped Ethereum", 18
                    ),
                ],
                pools_to_skip=[
                    "0x282b7d6bef6c78927f394330dca297eca2bd18cd",
                    "0x5738de8d0b864d5ef5d65b9e05b421b71f2c2eb4",
                    "0x5500721e5a063f0396c5e025a640e8491eb89aac",
                    "0x1ffd370f9d01f75de2cc701956886acec9749e80",
                ],
                rpc_url=self.OPTIMISM_RPC_URL,
            ),
            BSC_MAINNET_ID: ChainSettings(
                chain_id=BSC_MAINNET_ID,
                name="bsc",
                factory_address="0xdB1d10011AD0Ff90774D0C6Bb92e5C5c8b4461F7",
                # USDC-WBNB 0.3%
                stablecoin_wrapped_native_pool_address="0x6fe9e9de56356f7edbfcbb29fab7cd69471a4869",
                stablecoin_is_token0=True,
                wrapped_native_address="0xbb4cdb9cbd36b01bd1cbaebf2de08d9173bc095c",
                minimum_native_locked=Decimal("100"),
                stablecoin_addresses=[
                    "0x55d398326f99059ff775485246999027b3197955",  # USDT
                    "0x8ac76a51cc950d9822d68b83fe1ad97b32cd580d",  # USDC
                ],
                whitelist_tokens=[
                    "0xbb4cdb9cbd36b01bd1cbaebf2de08d9173bc095c",  # WBNB
                    "0x55d398326f99059ff775485246999027b3197955",  # USDT
                    "0x8ac76a51cc950d9822d68b83fe1ad97b32cd580d",  # USDC
                ],
                token_overrides=STATIC_TOKEN_DEFINITIONS_ETH,
                rpc_url=self.BSC_RPC_URL,
            ),
            MATIC_MAINNET_ID: ChainSettings(
                chain_id=MATIC_MAINNET_ID,
                name="polygon",
                factory_address="0x1F98431c8aD98523631AE4a59f267346ea31F984",
                # WMATIC-USDC 0.05%
                stablecoin_wrapped_native_pool_address="0xa374094527e1673a86de625aa59517c5de346d32",
                stablecoin_is_token0=False,
                wrapped_native_address="0x0d500b1d8e8ef31e21c99d1db9a6444d3adf1270",
                minimum_native_locked=Decimal("20000"),
                stablecoin_addresses=[
                    "0x2791bca1f2de4661ed88a30c99a7a9449aa84174",  # USDC
                    "0x8f3cf7ad23cd3cadbd9735aff958023239c6a063",  # DAI
                ],
                whitelist_tokens=[
                    "0x0d500b1d8e8ef31e21c99d1db9a6444d3adf1270",  # WMATIC
                    "0x7ceb23fd6bc0add59e62ac25578270cff1b9f619",  # WETH
                    "0x2791bca1f2de4661ed88a30c99a7a9449aa84174",  # USDC
                    "0x8f3cf7ad23cd3cadbd9735aff958023239c6a063",  # DAI
                ],
                rpc_url=self.POLYGON_RPC_URL,
            ),
            BASE_MAINNET_ID: ChainSettings(
                chain_id=BASE_MAINNET_ID,
                name="base",
                factory_address="0x33128a8fC17869897dcE68Ed026d694621f6FDfD",
                # WETH-USDC 0.05%
                stablecoin_wrapped_native_pool_address="0xd0b53D9277642d899DF5C87A3966A349A798F224",
                stablecoin_is_token0=False,
                wrapped_native_address="0x4200000000000000000000000000000000000006",
                minimum_native_locked=Decimal("1"),
                stablecoin_addresses=[
                    "0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913",  # USDC
                ],
                whitelist_tokens=[
                    "0x4200000000000000000000000000000000000006",  # WETH
                    "0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913",  # USDC
                ],
                token_overrides=STATIC_TOKEN_DEFINITIONS_BASE,
                rpc_url=self.BASE_RPC_URL,
            ),
            ARBITRUM_MAINNET_ID: ChainSettings(
                chain_id=ARBITRUM_MAINNET_ID,
                name="arbitrum",
                factory_address="0x1F98431c8aD98523631AE4a59f267346ea31F984",
                # WETH-USDC 0.3%
                stablecoin_wrapped_native_pool_address="0x17c14d2c404d167802b16c450d3c99f88f2c4f4d",
                stablecoin_is_token0=False,
                wrapped_native_address="0x82af49447d8a07e3bd95bd0d56f35241523fbab1",
                minimum_native_locked=Decimal("20"),
                stablecoin_addresses=[
                    "0xff970a61a04b1ca14834a43f5de4533ebddb5cc8",  # USDC
                    "0xda10009cbd5d07dd0cecc66161fc93d7c9000da1",  # DAI
                    "0xfd086bc7cd5c481dcc9c85ebe478a1c0b69fcbb9",  # USDT
                ],
                whitelist_tokens=[
                    "0x82af49447d8a07e3bd95bd0d56f35241523fbab1",  # WETH
                    "0xff970a61a04b1ca14834a43f5de4533ebddb5cc8",  # USDC
                    "0xda10009cbd5d07dd0cecc66161fc93d7c9000da1",  # DAI
                    "0xfd086bc7cd5c481dcc9c85ebe478a1c0b69fcbb9",  # USDT
                ],
                token_overrides=[
                    StaticTokenDefinition(
                        "0x82af49447d8a07e3bd95bd0d56f35241523fbab1", "WETH", "Wrapped Ethereum", 18
                    ),
                    StaticTokenDefinition(
                        "0xff970a61a04b1ca14834a43f5de4533ebddb5cc8", "USDC", "USD Coin", 6
                    ),
                ],
                rpc_url=self.ARBITRUM_RPC_URL,
            ),
            CELO_MAINNET_ID: ChainSettings(
                chain_id=CELO_MAINNET_ID,
                name="celo",
                factory_address="0xAfE208a311B21f13EF87E33A90049fC17A7acDEc",
                # CUSD-CELO 0.01%
                stablecoin_wrapped_native_pool_address="0x2d70cbabf4d8e61d5317b62cbe912935fd94e0fe",
                stablecoin_is_token0=False,
                wrapped_native_address="0x471ece3750da237f93b8e339c536989b8978a438",
                minimum_native_locked=Decimal("3600"),
                stablecoin_addresses=[
                    "0x765de816845861e75a25fca122bb6898b8b1282a",  # CUSD
                    "0xef4229c8c3250c675f21bcefa42f58efbff6002a",  # bridged USDC
                    "0xceba9300f2b948710d2653dd7b07f33a8b32118c",  # native USDC
                ],
                whitelist_tokens=[
                    "0x471ece3750da237f93b8e339c536989b8978a438",  # CELO
                    "0x765de816845861e75a25fca122bb6898b8b1282a",  # CUSD
                    "0xef4229c8c3250c675f21bcefa42f58efbff6002a",  # bridged USDC
                    "0xceba9300f2b948710d2653dd7b07f33a8b32118c",  # native USDC
                    "0xd8763cba276a3738e6de85b4b3bf5fded6d6ca73",  # CEUR
                    "0xe8537a3d056da446677b9e9d6c5db704eaab4787",  # CREAL
                    "0x46c9757c5497c5b1f2eb73ae79b6b67d119b0b58",  # PACT
                    "0x17700282592d6917f6a73d0bf8accf4d578c131e",  # MOO
                    "0x66803fb87abd4aac3cbb3fad7c3aa01f6f3fb207",  # Portal ETH
                    "0xbaab46e28388d2779e6e31fd00cf0e5ad95e327b",  # WBTC
                ],
                token_overrides=STATIC_TOKEN_DEFINITIONS_ETH,
                rpc_url=self.CELO_RPC_URL,
            ),
            AVALANCHE_MAINNET_ID: ChainSettings(
                chain_id=AVALANCHE_MAINNET_ID,
                name="avalanche",
                factory_address="0x740b1c1de25031C31FF4fC9A62f554A55cdC1baD",
                # WAVAX-USDC 0.05%
                stablecoin_wrapped_native_pool_address="0xfae3f424a0a47706811521e3ee268f00cfb5c45e",
                stablecoin_is_token0=False,
                wrapped_native_address="0xb31f66aa3c1e785363f0875a1b74e27b85fd66c7",
                minimum_native_locked=Decimal("1000"),
                stablecoin_addresses=[
                    "0xd586e7f844cea2f87f50152665bcbc2c279d8d70",  # DAI.e
                    "0xba7deebbfc5fa1100fb055a87773e1e99cd3507a",  # DAI
                    "0xa7d7079b0fead91f3e65f86e8915cb59c1a4c664",  # USDC.e
                    "0xb97ef9ef8734c71904d8002f8b6bc66dd9c48a6e",  # USDC
                    "0xc7198437980c041c805a1edcba50c1ce5db95118",  # USDT.e
                    "0x9702230a8ea53601f5cd2dc00fdbc13d4df4a8c7",  # USDT
                ],
                whitelist_tokens=[
                    "0xb31f66aa3c1e785363f0875a1b74e27b85fd66c7",  # WAVAX
                    "0xd586e7f844cea2f87f50152665bcbc2c279d8d70",  # DAI.e
                    "0xba7deebbfc5fa1100fb055a87773e1e99cd3507a",  # DAI
                    "0xa7d7079b0fead91f3e65f86e8915cb59c1a4c664",  # USDC.e
                    "0xb97ef9ef8734c71904d8002f8b6bc66dd9c48a6e",  # USDC
                    "0xc7198437980c041c805a1edcba50c1ce5db95118",  # USDT.e
                    "0x9702230a8ea53601f5cd2dc00fdbc13d4df4a8c7",  # USDT
                    "0x130966628846bfd36ff31a822705796e8cb8c18d",  # MIM
                ],
                token_overrides=STATIC_TOKEN_DEFINITIONS_ETH,
                rpc_url=self.AVALANCHE_RPC_URL,
            ),
            BLAST_MAINNET_ID: ChainSettings(
                chain_id=BLAST_MAINNET_ID,
                name="blast",
                factory_address="0x792edAdE80af5fC680d96a2eD80A44247D2Cf6Fd",
                # USDB-WETH 0.3%
                stablecoin_wrapped_native_pool_address="0xf52b4b69123cbcf07798ae8265642793b2e8990c",
                stablecoin_is_token0=True,
                wrapped_native_address="0x4300000000000000000000000000000000000004",
                minimum_native_locked=Decimal("1"),
                stablecoin_addresses=[
                    "0x4300000000000000000000000000000000000003",  # USDB
                ],
                whitelist_tokens=[
                    "0x4300000000000000000000000000000000000004",  # WETH
                    "0x4300000000000000000000000000000000000003",  # USDB
                ],
                rpc_url=self.BLAST_RPC_URL,
            ),
        }

    @property
    def supported_chains(self) -> Dict[int, ChainSettings]:
        """Get settings for all supported chains keyed by chain id."""
        return dict(self._settings)

    @property
    def enabled_chains(self) -> Dict[int, ChainSettings]:
        """Settings restricted to ENABLED_CHAIN_IDS (all chains when unset)."""
        if not self.ENABLED_CHAIN_IDS:
            return self.supported_chains
        return {
            int(chain_id): self.get_chain_settings(int(chain_id))
            for chain_id in self.ENABLED_CHAIN_IDS
        }

    def get_chain_settings(self, chain_id: int) -> ChainSettings:
        """
        Get settings for a specific chain.

        Args:
            chain_id: Numeric chain identifier

        Returns:
            ChainSettings for the chain

        Raises:
            ValueError: If the chain is not supported
        """
        settings = self._settings.get(chain_id)
        if settings is None:
            raise ValueError(f"Unsupported chain: {chain_id}")
        return settings

    def get_rpc_url(self, chain_id: int) -> Optional[str]:
        """Get RPC URL for a specific chain."""
        return self.get_chain_settings(chain_id).rpc_url
