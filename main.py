#main.py
import argparse
import logging
import sys

from musicrpc.config import Config
from musicrpc.debug import setup_logging
from musicrpc.discord_rpc import DiscordPresenceSink
from musicrpc.errors import ConfigError, PresenceLoginError
from musicrpc.loop import PollLoop
from musicrpc.metadata import AppleMediaServicesTransport, MetadataResolver
from musicrpc.music_macos import MusicAppSource
from musicrpc.observer import NowPlayingObserver
from musicrpc.reconciler import Assets, PresenceReconciler
from musicrpc.ttl_cache import CacheSet

logger = logging.getLogger("musicrpc")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Show what Music.app is playing on Discord.")
    parser.add_argument("--log-level", help="override LOG_LEVEL (debug, info, warn, error)")
    parser.add_argument("--once", action="store_true", help="run a single cycle and exit")
    return parser.parse_args(argv)


def build_loop(config: Config, caches: CacheSet, transport: AppleMediaServicesTransport) -> PollLoop:
    resolver = MetadataResolver(
        transport,
        caches.artwork,
        caches.share_urls,
        caches.artist_artwork,
        ttl=config.metadata_ttl,
        share_id_cache=caches.share_ids if config.cache_share_id else None,
    )
    observer = NowPlayingObserver(MusicAppSource(), resolver, caches.songs, song_ttl=config.song_ttl)
    reconciler = PresenceReconciler(
        DiscordPresenceSink(),
        config.client_id,
        assets=Assets(config.large_image_fallback, config.small_image_fallback),
    )
    return PollLoop(observer, reconciler, short_sleep=config.short_sleep, long_sleep=config.long_sleep)


def main(argv=None) -> int:
    args = parse_args(argv)
    try:
        config = Config.from_env()
        setup_logging(args.log_level or config.log_level, debug_file=config.debug_file)
    except (ConfigError, ValueError) as e:
        print(f"[Config] {e}", file=sys.stderr)
        return 2

    caches = CacheSet(sweep_interval=config.cache_sweep)
    transport = AppleMediaServicesTransport(config.storefront, timeout=config.http_timeout)
    try:
        loop = build_loop(config, caches, transport)
        logger.info("watching Apple Music (Ctrl+C to stop)")
        loop.run(max_cycles=1 if args.once else None)
    except PresenceLoginError as e:
        logger.critical("%s", e)
        return 1
    except KeyboardInterrupt:
        pass
    finally:
        transport.close()
        caches.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
