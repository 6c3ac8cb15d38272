from convergentEncode.encoder.rate_dist import ControlMode

DEFAULT_TIMESCALE = 0.01


def parse_rd(ctx, quantizer_flag: bool = False):
    """
    Sets up the control mode and the speed goal
    """
    # a negative epsilon is the old way of asking for quantizer mode
    if quantizer_flag or ctx.quality_epsilon < 0:
        ctx.control_mode = ControlMode.QUANTIZER
        ctx.quality_epsilon = abs(ctx.quality_epsilon)
    else:
        ctx.control_mode = ControlMode.BITRATE

    if ctx.timescale_target is None and ctx.time_cost_ratio is None:
        ctx.timescale_target = DEFAULT_TIMESCALE

    return ctx
