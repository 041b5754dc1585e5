"""
Kiosk greeter: greets each visitor once when a person is detected at the kiosk.

Polls a presence detector, confirms presence with hysteresis, and plays a
spoken greeting once per visit with a global cooldown. A small status API
exposes the greeting state to the kiosk UI.

Usage:
    python src/main.py --config config/config.yaml

Arguments:
    --config: Path to configuration file
    --simulate: Use the simulated detector instead of the camera
    --speech: Override the speech backend (pyttsx3 | log)
    --no-web: Do not start the status API
"""

import os
import sys
import argparse
import logging
import threading
import time
from typing import Any, Dict, Optional, Tuple

import uvicorn
import yaml

from greeting.phrases import supported_languages
from models.config import Config
from ops.logging import setup_logging
from runtime.context import build_context
from web.app import create_app


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge override into base and return base."""
    for k, v in (override or {}).items():
        if isinstance(v, dict) and isinstance(base.get(k), dict):
            _deep_merge(base[k], v)
        else:
            base[k] = v
    return base


def _read_yaml(path: str) -> Dict[str, Any]:
    if not os.path.exists(path):
        return {}
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def load_config(config_path: str) -> Dict[str, Any]:
    """
    Load the greeter configuration, later layers overriding earlier ones:
    1. `default.yaml` next to config_path (checked in)
    2. `config.yaml` next to config_path (kiosk-local overrides)
    3. config_path itself, when it is a different file
    """
    config_dir = os.path.dirname(config_path)
    local_path = os.path.join(config_dir, "config.yaml")
    try:
        merged = _read_yaml(os.path.join(config_dir, "default.yaml"))
        _deep_merge(merged, _read_yaml(local_path))
        if os.path.abspath(config_path) != os.path.abspath(local_path):
            _deep_merge(merged, _read_yaml(config_path))
        return merged
    except (OSError, yaml.YAMLError) as e:
        logging.error(f"Failed to load configuration: {e}")
        sys.exit(1)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_config(config: Dict[str, Any]) -> Tuple[bool, Optional[str]]:
    """
    Validate configuration file structure and values.

    Args:
        config: Configuration dictionary

    Returns:
        Tuple of (is_valid, error_message)
    """
    required_sections = ['detection', 'greeting', 'speech', 'log_path', 'log_level']
    for section in required_sections:
        if section not in config:
            return False, f"Missing required configuration section: {section}"

    # Detection
    detection = config.get('detection') or {}
    backend = detection.get('backend', 'opencv')
    if backend not in ('opencv', 'simulated'):
        return False, "detection.backend must be one of: opencv, simulated"

    interval = detection.get('poll_interval_s', 1.0)
    if not _is_number(interval) or interval <= 0:
        return False, "detection.poll_interval_s must be a positive number"

    debounce = detection.get('debounce_ms', 500)
    if not isinstance(debounce, int) or isinstance(debounce, bool) or debounce < 0:
        return False, "detection.debounce_ms must be a non-negative integer"

    for key in ('positive_threshold', 'negative_threshold'):
        value = detection.get(key, 1)
        if not isinstance(value, int) or isinstance(value, bool) or value < 1:
            return False, f"detection.{key} must be a positive integer"

    probability = detection.get('simulated_probability', 0.8)
    if not _is_number(probability) or not (0 <= probability <= 1):
        return False, "detection.simulated_probability must be between 0 and 1"

    camera = detection.get('camera') or {}
    if 'device_id' in camera:
        device_id = camera['device_id']
        if isinstance(device_id, bool) or not isinstance(device_id, (int, str)):
            return False, "detection.camera.device_id must be an integer (index) or string (URL)"
        if isinstance(device_id, int) and device_id < 0:
            return False, "detection.camera.device_id integer must be non-negative"

    # Greeting session timing
    greeting = config.get('greeting') or {}
    for key in ('session_duration_s', 'cooldown_s', 'face_lost_grace_s'):
        if key in greeting:
            value = greeting[key]
            if not _is_number(value) or value <= 0:
                return False, f"greeting.{key} must be a positive number"

    language = greeting.get('language', 'en-US')
    if language not in supported_languages():
        return False, f"greeting.language must be one of: {', '.join(supported_languages())}"

    # Speech
    speech = config.get('speech') or {}
    if speech.get('backend', 'pyttsx3') not in ('pyttsx3', 'log'):
        return False, "speech.backend must be one of: pyttsx3, log"

    # Web
    web = config.get('web') or {}
    if 'port' in web:
        port = web['port']
        if not isinstance(port, int) or isinstance(port, bool) or not (0 < port < 65536):
            return False, "web.port must be an integer between 1 and 65535"

    # Log settings
    valid_log_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
    if config['log_level'] not in valid_log_levels:
        return False, f"log_level must be one of: {', '.join(valid_log_levels)}"

    return True, None


def main():
    """Main application function."""
    parser = argparse.ArgumentParser(description='Kiosk Greeter - presence-triggered greetings')
    parser.add_argument('--config', type=str, default='config/config.yaml',
                        help='Path to configuration file')
    parser.add_argument('--simulate', action='store_true',
                        help='Use the simulated presence detector')
    parser.add_argument('--speech', choices=['pyttsx3', 'log'],
                        help='Override the speech backend')
    parser.add_argument('--no-web', action='store_true',
                        help='Do not start the status API')
    args = parser.parse_args()

    raw_config = load_config(args.config)
    if args.simulate:
        raw_config.setdefault('detection', {})['backend'] = 'simulated'
    if args.speech:
        raw_config.setdefault('speech', {})['backend'] = args.speech

    is_valid, error_msg = validate_config(raw_config)
    if not is_valid:
        logging.error(f"Configuration validation failed: {error_msg}")
        sys.exit(1)

    config = Config.from_dict(raw_config)
    setup_logging(config.log_path, config.log_level)
    logging.info("Starting Kiosk Greeter")

    try:
        ctx = build_context(config)
    except Exception as e:
        logging.error(f"Failed to initialize kiosk greeter: {e}")
        sys.exit(1)

    try:
        ctx.start()

        if config.web.enabled and not args.no_web:
            def run_web_app():
                uvicorn.run(
                    create_app(ctx),
                    host=config.web.host,
                    port=config.web.port,
                    log_level="info",
                )

            web_thread = threading.Thread(target=run_web_app, daemon=True)
            web_thread.start()
            logging.info(f"Status API started on port {config.web.port}")

        last_stats_log = time.time()
        while True:
            time.sleep(1)
            if time.time() - last_stats_log >= 60:
                status = ctx.engine.status()
                logging.info(
                    f"Greeter stats: samples={ctx.engine.samples_received}, "
                    f"sessions={ctx.engine.sessions.sessions_started}, "
                    f"active={status.session_active}, cooldown={status.is_on_cooldown}"
                )
                last_stats_log = time.time()

    except KeyboardInterrupt:
        logging.info("Interrupted by user")
    except Exception as e:
        logging.error(f"Error in main loop: {e}", exc_info=True)
    finally:
        ctx.shutdown()
        logging.info("Kiosk Greeter stopped")


if __name__ == "__main__":
    main()
