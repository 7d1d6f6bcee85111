from __future__ import annotations

# topic0 of JobEvent(uint256 indexed jobId, (uint8,bytes,bytes,uint32) eventData), lowercase, 0x-prefixed
JOB_EVENT_T0 = "0x2c03c6df0d03954344db45c40d4facdfa60aaf0e03186fc750db6b83c6bbd1bb"

DEFAULT_RPC_URLS: tuple[str, ...] = (
    "https://arb1.arbitrum.io/rpc",
    "https://arbitrum-one.publicnode.com",
    "https://endpoints.omniatech.io/v1/arbitrum/one/public",
)

DEFAULT_EXPLORER_URL = "https://arbiscan.io"
DEFAULT_TELEGRAM_API_BASE = "https://api.telegram.org"

DEFAULT_DECIMALS = 18

# Arbitrum One tokens resolved without a remote call (keys lowercased)
KNOWN_TOKENS: dict[str, tuple[str, int]] = {
    "0x0000000000000000000000000000000000000000": ("ETH", 18),
    "0x82af49447d8a07e3bd95bd0d56f35241523fbab1": ("WETH", 18),
    "0xaf88d065e77c8cc2239327c5edb3a432268e5831": ("USDC", 6),
    "0xfd086bc7cd5c481dcc9c85ebe478a1c0b69fcbb9": ("USDT", 6),
    "0xff970a61a04b1ca14834a43f5de4533ebddb5cc8": ("USDC.e", 6),
    "0x2f2a2543b76a4166549f7aab2e75bef0aefc5b0f": ("WBTC", 8),
}

# MECE category codes carried in job tags
MECE_TAGS: dict[str, str] = {
    "DA": "Digital Audio",
    "DV": "Digital Video",
    "DT": "Digital Text",
    "DS": "Digital Software",
    "DO": "Digital Others",
    "NDG": "Non-Digital Goods",
    "NDS": "Non-Digital Services",
    "NDO": "Non-Digital Others",
}
