#!/usr/bin/python
import os
import sys

from convergentEncode.cli.cli_setup.cli_args import read_args
from convergentEncode.cli.cli_setup.paths import parse_paths, get_output_folder
from convergentEncode.cli.cli_setup.ratecontrol import parse_rd
from convergentEncode.cli.cli_setup.validate_files import (
    validate_binaries,
    validate_input,
)
from convergentEncode.core.context import RunContext
from convergentEncode.core.exception import ConfigurationError
from convergentEncode.core.extras.trial_plot import plot_trials
from convergentEncode.core.ffmpeg import Ffmpeg
from convergentEncode.core.util.path import PathConvergent
from convergentEncode.encoder.rate_dist import ControlMode
from convergentEncode.metrics.impl.vmaf import VmafOptions
from convergentEncode.search.controller import PhaseController
from convergentEncode.search.executor import AomencTrialExecutor
from convergentEncode.search.result import SearchResult
from convergentEncode.search.sinks import ConsoleResultSink, CsvResultSink


def run_pipeline(ctx):
    creation_pipeline = [
        parse_paths,
        validate_binaries,
        validate_input,
    ]
    for pipeline_item in creation_pipeline:
        ctx = pipeline_item(ctx)
    return ctx


def confirm(question: str, ctx: RunContext) -> bool:
    if ctx.assume_yes:
        return True
    print(f"{question} [y/N]")
    return input().strip().lower() == "y"


def print_settings(ctx: RunContext):
    print(f"Input file: {ctx.input_file}")
    if ctx.output_csv != "":
        print(f"Output CSV file: {ctx.output_csv}")
    print(f"Temporary folder: {ctx.temp_folder}")
    if ctx.bits != 8:
        print(f"Color depth: {ctx.bits}")
    if ctx.control_mode == ControlMode.QUANTIZER:
        print(f"VMAF target: {ctx.quality_target}")
        print("Because the quantizer is used, resulting vmaf may not match this target")
    else:
        print(f"VMAF target: {ctx.quality_target} +- {ctx.quality_epsilon}")
    if ctx.uses_cost_ratio():
        if ctx.time_cost_ratio > 0:
            print(
                f"Will spend {ctx.time_cost_ratio}x as long to reduce the end video size by half"
            )
        else:
            print("Using slowest possible cpu settings for encode")
    elif ctx.use_cpu_time and ctx.cores != 1.0:
        print(
            f"Will target encoding {ctx.timescale_target / ctx.cores}s of video per cpu second"
            f" or {ctx.timescale_target}s/real life second with {ctx.cores} cores."
        )
    elif ctx.use_cpu_time:
        print(f"Will target encoding {ctx.timescale_target}s of video per cpu second")
    else:
        print(f"Will target encoding {ctx.timescale_target}s of video per second.")
    if not ctx.two_pass:
        print("WARNING: running with 1 pass video")


def print_result(result: SearchResult, ctx: RunContext):
    if not result.success:
        print(f"Search failed ({result.failure}) during {result.failed_phase}: {result.message}")
        return
    print(f"{ctx.control_mode.column_name()}: {result.control_value}")
    print(result.speed.explain())
    print(f"Trials run: {len(result.history)}")


def main(argv=None):
    """
    Main entry point
    """
    ctx: RunContext = RunContext()
    ctx, args = read_args(ctx, argv)
    ctx = parse_rd(ctx, quantizer_flag=args.quantizer)

    try:
        ctx.validate()
        ctx = run_pipeline(ctx)
    except ConfigurationError as e:
        print(e.message)
        sys.exit(1)

    print_settings(ctx)

    video = ctx.video
    print("Converting to raw before running tests... Be sure the destination has the required space")
    print(
        f"Total space needed for testing is roughly:"
        f" {2.1 * video.uncompressed_size(ctx.bits) / 1024.0 / 1024.0:.0f}MB"
    )
    if not confirm("Start running tests?", ctx):
        sys.exit(0)

    try:
        Ffmpeg.prepare_source(PathConvergent(ctx.input_file), ctx.video, ctx.temp_folder)
    except (RuntimeError, OSError) as e:
        print(e)
        PathConvergent(ctx.video.raw_path).remove()
        sys.exit(1)

    sinks = [ConsoleResultSink(ctx.control_mode)] if ctx.log_level >= 1 else []
    if ctx.output_csv != "":
        overwrite = os.path.exists(ctx.output_csv) and confirm(
            f"Output File: {ctx.output_csv} already exists. Continue anyway?", ctx
        )
        try:
            sinks.append(CsvResultSink(ctx.output_csv, ctx.control_mode, overwrite))
        except FileExistsError as e:
            print(e)
            PathConvergent(ctx.video.raw_path).remove()
            sys.exit(1)

    executor = AomencTrialExecutor(
        temp_folder=ctx.temp_folder,
        vmaf_options=VmafOptions(model=ctx.vmaf_model, threads=ctx.vmaf_threads),
        bits=ctx.bits,
        two_pass=ctx.two_pass,
        log_level=ctx.log_level,
    )

    try:
        result = PhaseController(ctx, executor, sinks).run()
    finally:
        for sink in sinks:
            sink.close()
        PathConvergent(ctx.video.raw_path).remove()

    print_result(result, ctx)
    if ctx.plot and result.success:
        plot_trials(result.history, ctx.quality_target, get_output_folder(ctx))

    if not result.success:
        sys.exit(1)


if __name__ == "__main__":
    main()
