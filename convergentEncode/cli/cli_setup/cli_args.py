import argparse

from argparse_range import range_action

from convergentEncode.core.context import RunContext
from convergentEncode.encoder.rate_dist import QUANTIZER_MIN, QUANTIZER_MAX


def read_args(ctx: RunContext, argv=None):
    """
    Parse the arguments for the program
    """
    parser = argparse.ArgumentParser(
        prog="convergentEncoder",
        description="Smart Convergent Video, finds aomenc settings that hit a quality target"
        " in a time budget",
    )

    parser.add_argument("input", type=str, help="Input video file")

    parser.add_argument(
        "--temp_folder",
        "-o",
        type=str,
        default=ctx.temp_folder,
        help="Temporary storage location, needs room for two raw copies of the video",
        dest="temp_folder",
    )

    parser.add_argument(
        "--csv",
        "-O",
        type=str,
        default=ctx.output_csv,
        help="Write every trial to this csv file",
        dest="output_csv",
    )

    parser.add_argument(
        "--vmaf_model",
        "-V",
        "-M",
        type=str,
        default=ctx.vmaf_model,
        help="Model file to use for VMAF calculation,"
        " be sure it's appropriate for your video resolution",
        dest="vmaf_model",
    )

    parser.add_argument(
        "--vmaf_threads",
        type=int,
        default=ctx.vmaf_threads,
        help="Threads for the vmaf scorer",
        dest="vmaf_threads",
    )

    parser.add_argument(
        "--timescale",
        "-t",
        type=float,
        default=None,
        help="Solve for the speed settings that encode this many seconds of video for every"
        " second of execution time (default 0.01)",
        dest="timescale_target",
    )

    parser.add_argument(
        "--time_cost_ratio",
        "-T",
        type=float,
        default=None,
        help="Solve for the ideal value of compression, -T10 will spend ten times as long to"
        " halve the output size, a negative value always uses the slowest settings",
        dest="time_cost_ratio",
    )

    parser.add_argument(
        "--realtime_clock",
        "-p",
        action="store_false",
        default=ctx.use_cpu_time,
        help="Measure wall time rather than cpu time. Not recommended,"
        " encoding is highly parallelizable so cpu time is the more useful metric",
        dest="use_cpu_time",
    )

    parser.add_argument(
        "--cores",
        "-P",
        type=float,
        default=ctx.cores,
        help="Extrapolate the total system performance for the timescale target with this"
        " many cores, can be a decimal since performance may not scale linearly",
        dest="cores",
    )

    parser.add_argument(
        "--quality",
        "-q",
        type=float,
        default=ctx.quality_target,
        action=range_action(0, 100),
        help="Target VMAF of the output video",
        dest="quality_target",
    )

    parser.add_argument(
        "--epsilon",
        "-Q",
        type=float,
        default=ctx.quality_epsilon,
        help="Acceptable VMAF deviation from the target, a negative value uses the"
        " quantizer instead of bitrate",
        dest="quality_epsilon",
    )

    parser.add_argument(
        "--quantizer",
        action="store_true",
        help="Search the cq level instead of the bitrate, the resulting VMAF may not match the"
        " target as closely",
        dest="quantizer",
    )

    parser.add_argument(
        "--start_quantizer",
        type=int,
        default=ctx.default_quantizer,
        action=range_action(QUANTIZER_MIN, QUANTIZER_MAX),
        help="First cq level tried in quantizer mode",
        dest="default_quantizer",
    )

    parser.add_argument(
        "--start_bitrate",
        type=float,
        default=ctx.default_bitrate,
        help="First bitrate (kbps) tried in bitrate mode",
        dest="default_bitrate",
    )

    parser.add_argument(
        "--width",
        "-x",
        type=int,
        default=ctx.test_width,
        help="Rescale the video to this width when testing, 0 keeps the aspect ratio",
        dest="test_width",
    )

    parser.add_argument(
        "--height",
        "-y",
        type=int,
        default=ctx.test_height,
        help="Rescale the video to this height when testing, 0 disables any rescaling",
        dest="test_height",
    )

    parser.add_argument(
        "--10bit",
        action="store_const",
        const=10,
        default=ctx.bits,
        help="Output to and test with 10 bit video",
        dest="bits",
    )

    parser.add_argument(
        "--12bit",
        action="store_const",
        const=12,
        help="Output to and test with 12 bit video",
        dest="bits",
    )

    parser.add_argument(
        "--one_pass",
        "-n",
        action="store_false",
        default=ctx.two_pass,
        help="Do not use two pass encoding (VERY NOT RECOMMENDED)",
        dest="two_pass",
    )

    parser.add_argument(
        "--test_fwd_keyframes",
        "-k",
        action="store_true",
        help="Test speed impact of forward keyframes (experimental)",
        dest="test_fwd_keyframes",
    )

    parser.add_argument(
        "--test_alt_tunings",
        "-K",
        action="store_true",
        help="Test speed impact of alternative tunings (experimental)",
        dest="test_alt_tunings",
    )

    parser.add_argument(
        "--max_trials",
        type=int,
        default=ctx.max_trials_per_phase,
        action=range_action(1, 1000),
        help="Give up on a rate phase after this many trials",
        dest="max_trials_per_phase",
    )

    parser.add_argument(
        "--log_level",
        type=int,
        default=ctx.log_level,
        action=range_action(0, 2),
        help="0 quiet, 1 one line per trial, 2 commands and lattice detail",
        dest="log_level",
    )

    parser.add_argument(
        "--progress",
        action="store_true",
        help="Show progress bars",
        dest="show_progress",
    )

    parser.add_argument(
        "--plot",
        action="store_true",
        help="Plot the trials into trial_plot.svg next to the csv (or in the temp folder)",
        dest="plot",
    )

    parser.add_argument(
        "--yes",
        "-Y",
        action="store_true",
        help="Don't ask for confirmation",
        dest="assume_yes",
    )

    args = parser.parse_args(argv)

    ctx.input_file = args.input
    ctx.temp_folder = args.temp_folder
    ctx.output_csv = args.output_csv
    ctx.vmaf_model = args.vmaf_model
    ctx.vmaf_threads = args.vmaf_threads
    ctx.timescale_target = args.timescale_target
    ctx.time_cost_ratio = args.time_cost_ratio
    ctx.use_cpu_time = args.use_cpu_time
    ctx.cores = args.cores
    ctx.quality_target = args.quality_target
    ctx.quality_epsilon = args.quality_epsilon
    ctx.default_quantizer = args.default_quantizer
    ctx.default_bitrate = args.default_bitrate
    ctx.test_width = args.test_width
    ctx.test_height = args.test_height
    ctx.bits = args.bits
    ctx.two_pass = args.two_pass
    ctx.test_fwd_keyframes = args.test_fwd_keyframes
    ctx.test_alt_tunings = args.test_alt_tunings
    ctx.max_trials_per_phase = args.max_trials_per_phase
    ctx.log_level = args.log_level
    ctx.show_progress = args.show_progress
    ctx.plot = args.plot
    ctx.assume_yes = args.assume_yes

    return ctx, args
