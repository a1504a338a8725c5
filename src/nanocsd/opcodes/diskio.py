"""Sound file input, queries and output."""

from ..enums import Rate
from ..opcode import ConstantProxy, Opcode, opcode, param
from ..signatures import exactly, prefix_then_repeating, repeating, signature

_FILE_QUERY_SIGNATURE = signature(Rate.INIT, [Rate.STRING, Rate.INIT])


@opcode(
    "soundin",
    signature(repeating(Rate.AUDIO), [Rate.STRING] + exactly(4, Rate.INIT)),
    is_multichannel=True,
)
class SoundIn(Opcode):
    """Reads audio from a sound file.

    ::

        ar1[, ar2[, ar3[, ... a24]]] soundin ifilcod [, iskptim] [, iformat] \\
              [, iskipinit] [, ibufsize]
    """

    filename = param()
    skip_time = param(0)
    format = param(0)
    skip_init = param(0)
    buffer_size = param(0)


@opcode(
    "diskin2",
    signature(
        repeating(Rate.AUDIO),
        [Rate.STRING, Rate.CONTROL] + exactly(6, Rate.INIT),
    ),
    is_multichannel=True,
)
class DiskIn2(Opcode):
    """Reads audio from a sound file with pitch control and resampling."""

    filename = param()
    pitch = param(ConstantProxy(1, rate=Rate.CONTROL))
    skip_time = param(0)
    wrap = param(0)
    format = param(0)
    window_size = param(0)
    buffer_size = param(0)
    skip_init = param(0)


@opcode(
    "mp3in",
    signature([Rate.AUDIO, Rate.AUDIO], [Rate.STRING] + exactly(4, Rate.INIT)),
    channel_count=2,
)
class Mp3In(Opcode):
    """Reads stereo audio from an MP3 file.

    ::

        ar1, ar2 mp3in ifilcod[, iskptim, iformat, iskipinit, ibufsize]
    """

    filename = param()
    skip_time = param(0)
    format = param(0)
    skip_init = param(0)
    buffer_size = param(0)


@opcode("filelen", _FILE_QUERY_SIGNATURE)
class FileLen(Opcode):
    """Length of a sound file, in seconds."""

    filename = param()
    allow_raw = param(1)


@opcode("filesr", _FILE_QUERY_SIGNATURE)
class FileSr(Opcode):
    filename = param()
    allow_raw = param(1)


@opcode("filenchnls", _FILE_QUERY_SIGNATURE)
class FileNchnls(Opcode):
    filename = param()
    allow_raw = param(1)


@opcode("filepeak", _FILE_QUERY_SIGNATURE)
class FilePeak(Opcode):
    """Peak absolute value of a sound file; channel 0 means all channels."""

    filename = param()
    channel = param(0)


@opcode("filebit", _FILE_QUERY_SIGNATURE)
class FileBit(Opcode):
    filename = param()
    allow_raw = param(1)


@opcode(
    "fout",
    signature((), prefix_then_repeating([Rate.STRING, Rate.INIT], Rate.AUDIO)),
    channel_count=0,
)
class FOut(Opcode):
    """Writes N audio signals to an N-channel file.

    ::

        fout ifilename, iformat, aout1 [, aout2, aout3,...,aoutN]
    """

    filename = param()
    format = param(0)
    sources = param(variadic=True)
