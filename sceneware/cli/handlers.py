"""
CLI Command Handlers

Each handler implements a specific CLI subcommand.
"""

import argparse
import asyncio
from pathlib import Path

from ..config import CONFIG_CATEGORIES, DEFAULTS, EngineSettings, UtteranceSettings, config
from ..diagnostics import config_table, console, enable_diagnostics, print_stats
from ..exceptions import SceneWareError
from ..scene_file import dump_entries, load_scene
from .parser import get_default_camera


def _setup_logging(args: argparse.Namespace):
    level = "DEBUG" if getattr(args, "verbose", False) else config.get("SN_LOG_LEVEL", "INFO")
    enable_diagnostics(level=level, log_file=config.get("SN_LOG_FILE") or None)


# =============================================================================
# DESCRIBE HANDLER
# =============================================================================

def handle_describe(args: argparse.Namespace) -> int:
    """Handle the 'describe' command: one offline cycle on a scene file."""
    from ..engine import SceneNarrator

    _setup_logging(args)

    try:
        scene = load_scene(args.scene)
        settings = EngineSettings.from_config().merged(
            min_confidence=args.min_confidence,
            max_objects=args.max_objects,
        )
    except SceneWareError as e:
        print(f"❌ Error: {e}")
        return 1

    narrator = SceneNarrator(settings=settings)
    description = narrator.describe(scene.detections, scene.identities)

    if description is None:
        print("🤷 Nothing to narrate")
        return 0

    print(f"🔊 {description}")

    if args.speak:
        from ..tts import TTSNarrationSink

        try:
            sink = TTSNarrationSink()
            sink.speak(description, UtteranceSettings.from_config())
            sink.wait()
        except SceneWareError as e:
            print(f"❌ TTS failed: {e}")
            return 1

    return 0


# =============================================================================
# LIVE HANDLER
# =============================================================================

def handle_live(args: argparse.Namespace) -> int:
    """Handle the 'live' command for real-time camera narration."""
    from ..engine import SceneNarrator
    from ..providers import CameraFrameSource, IdentityRegistry, YOLODetectionProvider

    _setup_logging(args)

    try:
        settings = EngineSettings.from_config().merged(detection_interval_ms=args.interval)
        utterance = UtteranceSettings.from_config()
        registry = IdentityRegistry()
        if args.identities:
            registry.update(load_scene(args.identities).identities)
    except SceneWareError as e:
        print(f"❌ Error: {e}")
        return 1

    detector = YOLODetectionProvider(
        model_path=args.model or config.get("SN_YOLO_MODEL"),
        backend=args.backend or config.get("SN_DETECTION_BACKEND"),
        fallback_backend=args.fallback_backend or config.get("SN_FALLBACK_BACKEND"),
    )

    sink = None
    tts_name = "off"
    if not args.no_tts:
        from ..tts import TTSNarrationSink

        try:
            sink = TTSNarrationSink()
            tts_name = sink.engine.value
        except SceneWareError as e:
            print(f"⚠️  TTS disabled: {e}")
            sink = None

    camera_device = args.camera if args.camera is not None else get_default_camera()
    if isinstance(camera_device, str) and camera_device.isdigit():
        camera_device = int(camera_device)
    camera = CameraFrameSource(camera_device)

    try:
        if not camera.open():
            print(f"❌ Error: cannot open camera {camera_device}")
            return 1
    except SceneWareError as e:
        print(f"❌ Error: {e}")
        return 1

    narrator = SceneNarrator(
        detection_provider=detector,
        identity_provider=registry,
        narration_sink=sink,
        frame_source=camera,
        settings=settings,
        utterance=utterance,
        on_description=None if sink else (lambda text: print(f"🔊 {text}")),
    )

    print("🎬 Starting live narration...")
    print(f"   Camera: {camera_device} | Backend: {detector.backend} | "
          f"Interval: {settings.detection_interval_ms}ms | TTS: {tts_name}")

    try:
        asyncio.run(narrator.run(duration=args.duration or None))
    except KeyboardInterrupt:
        print("\n🛑 Stopped")
    finally:
        narrator.stop()
        camera.release()

    print_stats(narrator.stats)

    if args.history_out:
        Path(args.history_out).write_text(dump_entries(narrator.history))
        print(f"💾 History saved to {args.history_out}")

    return 0


# =============================================================================
# CONFIG HANDLER
# =============================================================================

def handle_config(args: argparse.Namespace) -> int:
    """Handle the 'config' command."""
    if args.get:
        print(f"{args.get}={config.get(args.get)}")
        return 0

    if args.set:
        key, value = args.set
        if key not in DEFAULTS:
            print(f"❌ Unknown config key: {key}")
            return 1
        config.set(key, value)
        config.save(keys_only=[key])
        print(f"✅ Set {key}={value}")
        return 0

    if args.show:
        console.print(config_table(config.to_dict(), CONFIG_CATEGORIES))
        return 0

    # Default: show help
    print("Use --show to view config, --set KEY VALUE to modify")
    return 0


# =============================================================================
# CHECK HANDLER
# =============================================================================

def handle_check(args: argparse.Namespace) -> int:
    """Handle the 'check' command."""
    component = args.component
    ok = True

    if component in ("tts", "all"):
        from ..tts import check_tts

        print("🔊 Checking TTS...")
        report = check_tts()
        print(f"   Platform: {report['platform']}")
        print(f"   Configured: {report['configured_engine']}")
        if report["available_engines"]:
            print(f"   ✅ Available: {', '.join(report['available_engines'])}")
        else:
            print("   ❌ No TTS engine found (install espeak or pip install sceneware[tts])")
            ok = False

    if component in ("yolo", "all"):
        from ..providers import is_yolo_available

        print("🎯 Checking YOLO...")
        if is_yolo_available():
            print("   ✅ Ultralytics installed")
        else:
            print("   ❌ Ultralytics not installed (pip install sceneware[vision])")
            ok = False

    return 0 if ok else 1
