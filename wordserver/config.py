from __future__ import annotations
import argparse
import os
from dataclasses import dataclass, field
from typing import List, Mapping, Optional, Sequence

# Every flag falls back to an environment variable of the same name, so the
# container can be configured either way.

DEFAULT_WORD_LIST = '/app/wordlist.txt'
DEFAULT_TEMPLATE_DIR = '/app/templates'
DEFAULT_STATIC_DIR = '/app/static'
DEFAULT_PORT = 8080

@dataclass
class Settings:
    word_lists: List[str] = field(default_factory=lambda: [DEFAULT_WORD_LIST])
    template_dir: str = DEFAULT_TEMPLATE_DIR
    static_dir: str = DEFAULT_STATIC_DIR
    host: str = '0.0.0.0'
    port: int = DEFAULT_PORT
    reload_words: bool = False
    download: bool = False
    word_list_url: str = ''
    shutdown_timeout: float = 5.0
    cors_origins: List[str] = field(default_factory=lambda: ['*'])
    log_level: str = 'INFO'

def _split(value: str) -> List[str]:
    return [v.strip() for v in value.split(',') if v.strip()]

def _truthy(value: str) -> bool:
    return value.strip().lower() in ('1', 'true', 'yes', 'on')

def build_parser(env: Mapping[str, str]) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='wordserver', description='Anagram and word match web server')
    parser.add_argument('--word-list', dest='word_lists', action='append',
                        help='Path of a word list file; repeat to multiplex several lists (env WORD_LIST)')
    parser.add_argument('--template-dir', default=env.get('TEMPLATE_DIR', DEFAULT_TEMPLATE_DIR),
                        help='Path of the templates directory')
    parser.add_argument('--static-dir', default=env.get('STATIC_DIR', DEFAULT_STATIC_DIR),
                        help='Path of the static files directory')
    parser.add_argument('--host', default=env.get('HOST', '0.0.0.0'))
    parser.add_argument('--port', type=int, default=int(env.get('PORT', DEFAULT_PORT)))
    parser.add_argument('--reload-words', action='store_true', default=_truthy(env.get('RELOAD_WORDS', '')),
                        help='Load the word lists on every request instead of once at startup')
    parser.add_argument('--download', action='store_true', default=_truthy(env.get('DOWNLOAD', '')),
                        help='Fetch the word list from --word-list-url and exit')
    parser.add_argument('--word-list-url', default=env.get('WORD_LIST_URL', ''))
    parser.add_argument('--shutdown-timeout', type=float, default=float(env.get('SHUTDOWN_TIMEOUT', 5.0)),
                        help='Seconds to wait for in-flight requests on shutdown')
    parser.add_argument('--cors-origin', dest='cors_origins', action='append',
                        help='Allowed CORS origin; repeatable (env CORS_ORIGINS)')
    parser.add_argument('--log-level', default=env.get('LOG_LEVEL', 'INFO'))
    return parser

def parse_settings(argv: Optional[Sequence[str]] = None, env: Optional[Mapping[str, str]] = None) -> Settings:
    env = os.environ if env is None else env
    args = build_parser(env).parse_args(argv)
    # append actions can't take a list default without merging into it
    word_lists = args.word_lists or _split(env.get('WORD_LIST', '')) or [DEFAULT_WORD_LIST]
    cors_origins = args.cors_origins or _split(env.get('CORS_ORIGINS', '')) or ['*']
    return Settings(
        word_lists=word_lists,
        template_dir=args.template_dir,
        static_dir=args.static_dir,
        host=args.host,
        port=args.port,
        reload_words=args.reload_words,
        download=args.download,
        word_list_url=args.word_list_url,
        shutdown_timeout=args.shutdown_timeout,
        cors_origins=cors_origins,
        log_level=args.log_level.upper(),
    )
