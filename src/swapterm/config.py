"""Configuration system using pydantic-settings with environment variable loading."""

from decimal import Decimal

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class ChainSettings(BaseSettings):
    """Chain connection and contract settings."""

    model_config = SettingsConfigDict(env_prefix="CHAIN_")

    rpc_url: str = "http://localhost:8545"
    private_key: SecretStr = SecretStr("")
    token_address: str = ""
    primary_chain_id: int = 1  # Ethereum mainnet
    secondary_chain_id: int = 17000  # Holesky testnet
    native_symbol: str = "ETH"
    token_symbol: str = "ROSE"
    request_timeout: float = 15.0


class SwapSettings(BaseSettings):
    """Swap panel and transaction guard parameters."""

    model_config = SettingsConfigDict(env_prefix="SWAP_")

    default_slippage: Decimal = Decimal("3.0")  # percent
    min_slippage: Decimal = Decimal("0.1")
    max_slippage: Decimal = Decimal("25")
    slippage_step: Decimal = Decimal("0.1")
    quote_refresh_interval: float = 5.0  # seconds between quote polls
    min_amount: Decimal = Decimal("0.000001")
    max_trade_reserve_divisor: int = 20  # single withdraw capped at reserve / 20
    display_decimals: int = 6


class ChartSettings(BaseSettings):
    """Price history feed and candle defaults."""

    model_config = SettingsConfigDict(env_prefix="CHART_")

    feed_url: str = (
        "https://api.coingecko.com/api/v3/coins/rose/market_chart"
        "?vs_currency=usd&days=30&interval=daily"
    )
    default_interval: str = "1d"
    request_timeout: float = 10.0


class DashboardSettings(BaseSettings):
    """Chart API server configuration."""

    model_config = SettingsConfigDict(env_prefix="DASHBOARD_")

    enabled: bool = False
    host: str = "127.0.0.1"
    port: int = 8080


class AppSettings(BaseSettings):
    """Root application settings, composing all sub-settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
    )

    log_level: str = "INFO"
    log_format: str = "console"  # "json" or "console"
    # The console draws on the tty, so logs go to a file. Empty logs to stderr.
    log_file: str = "swapterm.log"
    chain: ChainSettings = ChainSettings()
    swap: SwapSettings = SwapSettings()
    chart: ChartSettings = ChartSettings()
    dashboard: DashboardSettings = DashboardSettings()
