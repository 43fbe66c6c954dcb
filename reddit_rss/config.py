from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # Server
    host: str = "0.0.0.0"
    port: int = 8080
    log_level: str = "WARNING"

    # Upstream listing API
    reddit_url: str = "https://www.reddit.com"
    user_agent: str = "reddit-rss 1.0"
    listing_timeout: float = 10.0

    # Links in rendered items — internal_url prefixes are rewritten to mirror_url
    mirror_url: str = "https://old.reddit.com"
    internal_url: str = "https://old.reddit.com"

    # Article fetching
    fetch_timeout: float = 15.0
    # Batches of batch_capacity posts run one after another, so a listing of
    # N posts waits for the slowest fetch in each of ceil(N / batch_capacity)
    # rounds. Raise it to trade more concurrent requests for lower latency.
    batch_capacity: int = 10
    max_content_length: int = 50000
    max_download_bytes: int = 2 * 1024 * 1024

    # Feed envelope
    about_url: str = "https://www.reddit.com/r/rss/comments/fvg3ed/i_built_a_better_rss_feed_for_reddit/"
    feed_description: str = "Reddit RSS feed that links directly to the content"
    feed_author_name: str = "reddit-rss"
    feed_author_email: str = ""

    # Response
    cache_control: str = "s-maxage=1800, stale-while-revalidate=3600"
