from rich.pretty import pprint

from pennant import *

with Parser("brew", env_prefix="HOMEBREW_", shell=True, fancy=True) as parser:
    parser.switch("verbose", descr="Flag for verbosity")
    parser.switch("--pry", env="pry", descr="Start a pry session on failure")
    parser.flag("--filename=", descr="Name of the file")
    parser.comma_array("--files", descr="Comma separated filenames")
    parser.flag("--flag1=")
    parser.flag("--flag3=")
    parser.flag("--flag2=", required_for="--flag1=")
    parser.flag("--flag4=", depends_on="--flag3=")
    parser.conflicts("--flag1=", "--flag3=")


if __name__ == '__main__':
    pprint(parser.options)
    pprint(parser.parse())
