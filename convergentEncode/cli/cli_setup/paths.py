import os

from convergentEncode.core.exception import ConfigurationError


def parse_paths(ctx):
    """
    Sets up the paths
    """
    ctx.input_file = os.path.abspath(ctx.input_file)
    ctx.temp_folder = os.path.abspath(ctx.temp_folder)
    if not os.path.exists(ctx.temp_folder):
        os.makedirs(ctx.temp_folder)

    if ctx.output_csv != "":
        ctx.output_csv = os.path.abspath(ctx.output_csv)
        csv_folder = os.path.dirname(ctx.output_csv)
        if not os.path.isdir(csv_folder):
            raise ConfigurationError(f"Folder for the csv file {csv_folder} does not exist")

    return ctx


def get_output_folder(ctx) -> str:
    if ctx.output_csv != "":
        return os.path.dirname(ctx.output_csv)
    return ctx.temp_folder
