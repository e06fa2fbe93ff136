"""
Main CLI Entry Point

Command line front end for the edge response analyzer.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from edge_response.core.circle_detector import NoCircleDetectedError
from edge_response.core.edge_enhancer import enhance_edges
from edge_response.core.image_buffer import ImageBuffer, ImageValidationError, NoImageLoadedError
from edge_response.core.quality_metrics import ROI, InvalidROIError, compute_cnr, compute_noise_level
from edge_response.data.config_manager import ConfigError, ConfigManager
from edge_response.pipeline import AnalysisPipeline
from edge_response.utils.file_io import FileIO


def setup_logging(debug: bool = False):
    """Configure root logging once for the CLI process."""
    level = logging.DEBUG if debug else logging.INFO

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(
        fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    ))

    logging.basicConfig(
        level=level,
        handlers=[handler],
        force=True
    )


def build_pipeline(args) -> AnalysisPipeline:
    config_path = getattr(args, 'config', None)
    overrides = getattr(args, 'set', None) or []
    if not config_path and not overrides:
        return AnalysisPipeline()
    manager = ConfigManager(Path(config_path) if config_path else None)
    manager.apply_overrides(overrides)
    return AnalysisPipeline.from_config(manager)


def resolve_image(args, pipeline: AnalysisPipeline) -> Optional[ImageBuffer]:
    """Image named by --image, or a synthesized disk for --synthetic."""
    if getattr(args, 'image', None):
        return pipeline.load(Path(args.image))
    synth = pipeline.synthesizer
    width = args.width if args.width is not None else synth.config.default_width
    height = args.height if args.height is not None else synth.config.default_height
    radius = args.radius if args.radius is not None else synth.config.default_radius
    return synth.synthesize(width, height, radius)


def cmd_synthesize(args):
    """Synthesize a blurred-disk test image"""
    logger = logging.getLogger(__name__)
    pipeline = build_pipeline(args)
    image = resolve_image(args, pipeline)

    print(f"Test image synthesized: {image.width}x{image.height}")

    if args.output:
        FileIO().save_image(Path(args.output), image.pixels)
        logger.info(f"Synthesized image written to {args.output}")

    return 0


def cmd_analyze(args):
    """Detect circle, extract radial profile, derive response function"""
    pipeline = build_pipeline(args)
    result = pipeline.analyze(resolve_image(args, pipeline))

    circle = result.circle
    print("\n" + "=" * 60)
    print("  Edge Response Result")
    print("=" * 60)
    print(f"  Center:          ({circle.center_x:.2f}, {circle.center_y:.2f})")
    print(f"  Radius:          {circle.radius:.2f}")
    print(f"  Votes:           {circle.votes}")
    print(f"  Profile radii:   {len(result.profile)}")
    print(f"  Response length: {len(result.response)}")

    falloff = result.response.steepest_falloff()
    if falloff is not None:
        print(f"  Steepest edge:   r={falloff[0]} ({falloff[1]:.3f} per step)")

    if args.show_profile:
        print("\n  radius  mean_intensity  response")
        responses = dict(zip(result.response.radii.tolist(), result.response.values.tolist()))
        for r, mean in result.profile:
            resp = responses.get(r)
            resp_text = f"{resp:9.3f}" if resp is not None else "        -"
            print(f"  {r:6d}  {mean:14.3f}  {resp_text}")

    print("=" * 60 + "\n")
    return 0


def cmd_noise(args):
    """Global noise level"""
    pipeline = build_pipeline(args)
    noise = compute_noise_level(resolve_image(args, pipeline))
    print(f"Noise Level: {noise:.6f}")
    return 0


def cmd_cnr(args):
    """Region contrast-to-noise ratio"""
    pipeline = build_pipeline(args)
    roi = ROI.from_tuple(args.roi) if args.roi else pipeline.default_roi
    cnr = compute_cnr(resolve_image(args, pipeline), roi)
    print(f"CNR: {cnr:.6f}")
    return 0


def cmd_enhance(args):
    """Laplacian edge enhancement"""
    logger = logging.getLogger(__name__)
    pipeline = build_pipeline(args)
    enhanced = enhance_edges(resolve_image(args, pipeline), pipeline.enhancer_config)
    FileIO().save_image(Path(args.output), enhanced.pixels)
    logger.info(f"Enhanced image written to {args.output}")
    print("Edge enhancement applied")
    return 0


def cmd_config(args):
    """Show or write the effective configuration"""
    manager = build_pipeline(args).to_config()
    if args.output:
        path = manager.save(Path(args.output))
        print(f"Configuration written to {path}")
    else:
        print(json.dumps(manager.to_dict(), indent=4))
    return 0


def _add_image_source(parser: argparse.ArgumentParser, required: bool = True):
    source = parser.add_mutually_exclusive_group(required=required)
    source.add_argument('--image', help='Input image file path')
    source.add_argument('--synthetic', action='store_true', help='Use a synthesized disk image')
    parser.add_argument('--width', type=int, help='Synthetic image width')
    parser.add_argument('--height', type=int, help='Synthetic image height')
    parser.add_argument('--radius', type=int, help='Synthetic disk radius')


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Edge Response Function Analyzer',
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    parser.add_argument('--debug', action='store_true', help='Enable debug logging')
    parser.add_argument('--config', help='JSON configuration file (see config/analysis.json)')
    parser.add_argument('--set', action='append', metavar='KEY=VALUE',
                        help='Override a setting, e.g. detector.hough_param2=30 (repeatable)')

    subparsers = parser.add_subparsers(dest='command', help='Command to execute')

    synth_parser = subparsers.add_parser(
        'synthesize',
        help='Synthesize a blurred-disk test image',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='''
Examples:
  python -m edge_response.main synthesize --width 500 --height 500 --radius 200 --output disk.png
        '''
    )
    synth_parser.add_argument('--width', type=int, help='Image width')
    synth_parser.add_argument('--height', type=int, help='Image height')
    synth_parser.add_argument('--radius', type=int, help='Disk radius')
    synth_parser.add_argument('--output', help='Write the synthesized image to this path')

    analyze_parser = subparsers.add_parser(
        'analyze',
        help='Calculate the edge response function',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='''
Examples:
  python -m edge_response.main analyze --image disk.png
  python -m edge_response.main analyze --synthetic --radius 120 --show-profile
        '''
    )
    _add_image_source(analyze_parser)
    analyze_parser.add_argument('--show-profile', action='store_true', help='Print the profile and response table')

    noise_parser = subparsers.add_parser('noise', help='Calculate the global noise level')
    _add_image_source(noise_parser)

    cnr_parser = subparsers.add_parser('cnr', help='Calculate region CNR')
    _add_image_source(cnr_parser)
    cnr_parser.add_argument('--roi', type=int, nargs=4, metavar=('X', 'Y', 'W', 'H'), help='Region of interest')

    enhance_parser = subparsers.add_parser('enhance', help='Apply Laplacian edge enhancement')
    _add_image_source(enhance_parser)
    enhance_parser.add_argument('--output', required=True, help='Output image path')

    config_parser = subparsers.add_parser('config', help='Show the effective configuration')
    config_parser.add_argument('--output', help='Write the configuration to this JSON file')

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(args.debug)
    logger = logging.getLogger(__name__)

    if not args.command:
        parser.print_help()
        return 0

    commands = {
        'synthesize': cmd_synthesize,
        'analyze': cmd_analyze,
        'noise': cmd_noise,
        'cnr': cmd_cnr,
        'enhance': cmd_enhance,
        'config': cmd_config,
    }

    try:
        return commands[args.command](args)
    except NoImageLoadedError:
        logger.error("No image loaded")
        return 1
    except NoCircleDetectedError:
        logger.error("No circles detected")
        return 1
    except InvalidROIError as e:
        logger.error(f"Invalid ROI: {e}")
        return 1
    except ImageValidationError as e:
        logger.error(f"Invalid image parameters: {e}")
        return 1
    except ConfigError as e:
        logger.error(f"Invalid configuration: {e}")
        return 1
    except OSError as e:
        logger.error(f"File error: {e}")
        return 1


if __name__ == '__main__':
    sys.exit(main())
