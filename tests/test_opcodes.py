"""Catalog tests: every binding resolves its documented rate variants.

Each test builds a small instrument around the opcode and checks the
resolved rates, then compiles it to orchestra text.
"""

import pytest

from nanocsd.enums import Rate
from nanocsd.opcode import (
    OPCODES,
    FTable,
    InstrumentBuilder,
    OutputProxy,
    OverloadError,
    expand,
)
from nanocsd.opcodes import (
    DiskIn2,
    DownSamp,
    FileBit,
    FileLen,
    FileNchnls,
    FilePeak,
    FileSr,
    Flooper2,
    FOut,
    FtSave,
    FtSaveK,
    InCh,
    Interp,
    Mp3In,
    OutCh,
    Print,
    PrintK,
    SndLoop,
    SoundIn,
    Sprintf,
    SprintfK,
    StrCat,
    StrCatK,
    Tab,
    TabI,
    Table,
    Table3,
    TableI,
    TableIW,
    TableW,
    TabW,
    TabWI,
    UpSamp,
    ar,
    kr,
)
from nanocsd.signatures import SignatureError, repeating

CATALOG = [
    "diskin2",
    "downsamp",
    "filebit",
    "filelen",
    "filenchnls",
    "filepeak",
    "filesr",
    "flooper2",
    "fout",
    "ftsave",
    "ftsavek",
    "inch",
    "interp",
    "mp3in",
    "outch",
    "print",
    "printk",
    "sndloop",
    "soundin",
    "sprintf",
    "sprintfk",
    "strcat",
    "strcatk",
    "tab",
    "tab_i",
    "table",
    "table3",
    "tablei",
    "tableiw",
    "tablew",
    "tabw",
    "tabw_i",
    "upsamp",
]


def _build(build_fn, name="test"):
    """Helper: run build_fn inside an InstrumentBuilder and compile the result."""
    with InstrumentBuilder() as builder:
        result = build_fn(builder)
    instrument = builder.build(name=name, optimize=False)
    text = instrument.compile()
    assert f"instr {name}" in text
    return result, instrument


def _signal():
    return UpSamp.new(source=kr(0.5))


MULTI_OUTPUT = {
    "diskin2": (
        lambda: DiskIn2.new(filename="stereo.wav", channel_count=2),
        (Rate.AUDIO, Rate.AUDIO),
    ),
    "inch": (
        lambda: InCh.new(channels=[kr(1), kr(2), kr(3)]),
        (Rate.AUDIO,) * 3,
    ),
    "mp3in": (
        lambda: Mp3In.new(filename="song.mp3"),
        (Rate.AUDIO, Rate.AUDIO),
    ),
    "sndloop": (
        lambda: SndLoop.new(
            source=ar(0), pitch=kr(1), trigger=kr(1), duration=2, fade=0.05
        ),
        (Rate.AUDIO, Rate.CONTROL),
    ),
    "soundin": (
        lambda: SoundIn.new(filename="quad.wav", channel_count=4),
        (Rate.AUDIO,) * 4,
    ),
}


# ---------------------------------------------------------------------------
# Catalog invariants
# ---------------------------------------------------------------------------


class TestCatalog:
    def test_catalog_registered(self):
        assert set(CATALOG) <= set(OPCODES)

    @pytest.mark.parametrize("name", CATALOG)
    def test_signatures_are_well_formed(self, name):
        """Repeating slots only ever form the tail of a sequence."""
        cls = OPCODES[name]
        assert cls._signatures
        for signature_ in cls._signatures:
            for sequence in signature_:
                if not sequence.is_repeating:
                    extended = sequence + [Rate.INIT]
                    assert extended.prefix == sequence.prefix + (Rate.INIT,)
                    continue
                with pytest.raises(SignatureError):
                    sequence + [Rate.INIT]
                with pytest.raises(SignatureError):
                    sequence + repeating(Rate.INIT)
                count = len(sequence.prefix) + 2 * len(sequence.cycle)
                tail = sequence.slots(count)[len(sequence.prefix) :]
                assert tail == sequence.cycle * 2
            assert not any(rate.is_wildcard for rate in signature_.outputs.rates)
            assert not (signature_.outputs.prefix and signature_.outputs.cycle)

    def test_catalog_has_repeating_inputs(self):
        names = {
            name
            for name in CATALOG
            if any(x.inputs.is_repeating for x in OPCODES[name]._signatures)
        }
        assert {"inch", "outch", "fout", "ftsave", "print", "sprintf"} <= names

    def test_multi_output_bindings_covered(self):
        """Every multichannel or multi-output binding has an expansion case."""
        names = {
            name
            for name in CATALOG
            if OPCODES[name]._is_multichannel
            or any(len(x.outputs.prefix) > 1 for x in OPCODES[name]._signatures)
        }
        assert names == set(MULTI_OUTPUT)

    @pytest.mark.parametrize("name", sorted(MULTI_OUTPUT))
    def test_expand_multi_output(self, name):
        build_fn, rates = MULTI_OUTPUT[name]
        node = build_fn()
        assert node.name == name
        outputs = expand(node, len(rates))
        assert len(outputs) == len(rates)
        assert tuple(x.rate for x in outputs) == rates
        assert tuple(x.rate for x in outputs) == node.signature.outputs.slots(
            len(rates)
        )
        assert [x.index for x in outputs] == list(range(len(rates)))
        assert all(x.node is node for x in outputs)
        with pytest.raises(SignatureError):
            expand(node, len(rates) + 1)

    @pytest.mark.parametrize("name", CATALOG)
    def test_parameters_fit_signatures(self, name):
        cls = OPCODES[name]
        count = len(cls._ordered_keys) - (1 if cls._variadic_key else 0)
        for signature_ in cls._signatures:
            assert signature_.inputs.admits(count)
            if cls._variadic_key:
                assert signature_.inputs.is_repeating


# ---------------------------------------------------------------------------
# Tables (tables.py)
# ---------------------------------------------------------------------------


class TestTables:
    @pytest.mark.parametrize("opcode_cls", [Table, TableI, Table3])
    def test_read_rates(self, opcode_cls):
        """The index rate selects the result rate."""

        def build(builder):
            return (
                opcode_cls.new(index=_signal(), table=FTable(1)),
                opcode_cls.new(index=kr(0), table=FTable(1)),
                opcode_cls.new(index=0, table=FTable(1)),
            )

        (audio, control, init), _ = _build(build)
        assert audio.rate is Rate.AUDIO
        assert control.rate is Rate.CONTROL
        assert init.rate is Rate.INIT

    def test_table_with_defaults(self):
        """A control index plus the table resolves to the control variant."""
        output = Table.new(index=kr(0), table=FTable(1))
        assert isinstance(output, OutputProxy)
        assert output.rate is Rate.CONTROL
        assert output.node.input_rates == (
            Rate.CONTROL,
            Rate.INIT,
            Rate.INIT,
            Rate.INIT,
        )

    def test_table_rejects_string_index(self):
        with pytest.raises(OverloadError):
            Table.new(index="zero", table=FTable(1))

    def test_tab(self):
        """The audio variant comes first, so a control index also reads audio."""
        assert [str(x) for x in Tab._signatures] == ["a <- xii", "k <- kii"]
        control = Tab.new(index=kr(0), table=FTable(1))
        assert control.rate is Rate.AUDIO
        assert control.node.signature == Tab._signatures[0]
        assert Tab.new(index=_signal(), table=FTable(1)).rate is Rate.AUDIO
        with pytest.raises(OverloadError):
            Tab.new(index=0, table=FTable(1))
        assert TabI.new(index=0, table=FTable(1)).rate is Rate.INIT

    def test_writers(self):
        def build(builder):
            signal = _signal()
            return (
                TableW.new(source=signal, index=signal, table=FTable(1)),
                TableW.new(source=kr(1), index=kr(0), table=FTable(1)),
                TableIW.new(source=1, index=0, table=FTable(1)),
                TabW.new(source=kr(1), index=kr(0), table=FTable(1)),
                TabWI.new(source=1, index=0, table=FTable(1)),
            )

        nodes, instrument = _build(build)
        assert all(node.is_effect for node in nodes)
        assert instrument.effects == nodes

    def test_writer_rates_must_agree(self):
        with InstrumentBuilder():
            with pytest.raises(OverloadError):
                TableW.new(source=_signal(), index=kr(0), table=FTable(1))

    def test_ftsave(self):
        def build(builder):
            FtSave.new(filename="tables.ftl", tables=[FTable(1), FTable(2)])
            FtSaveK.new(filename="tables.ftl", trigger=kr(1), tables=[FTable(1)])

        _, instrument = _build(build)
        assert [node.name for node in instrument.nodes] == ["ftsave", "ftsavek"]
        assert instrument.nodes[0].input_rates == (Rate.STRING,) + (Rate.INIT,) * 3


# ---------------------------------------------------------------------------
# Input and output (inout.py)
# ---------------------------------------------------------------------------


class TestInOut:
    def test_inch(self):
        channels = InCh.new(channels=[kr(1), kr(2)])
        assert [x.rate for x in channels] == [Rate.AUDIO, Rate.AUDIO]
        assert InCh.new(channels=kr(1)).rate is Rate.AUDIO

    def test_outch_pairs(self):
        """Three (channel, signal) pairs flatten into six alternating inputs."""

        def build(builder):
            signal = _signal()
            return OutCh.new(
                pairs=[(kr(1), signal), (kr(2), signal), (kr(3), signal)]
            )

        node, _ = _build(build)
        assert node.is_effect
        assert node.input_rates == (Rate.CONTROL, Rate.AUDIO) * 3
        assert len(node.pairs) == 6

    def test_outch_incomplete_pair(self):
        with InstrumentBuilder():
            with pytest.raises(OverloadError):
                OutCh.new(pairs=[kr(1), _signal(), kr(2)])

    def test_outch_swapped_pair(self):
        with InstrumentBuilder():
            with pytest.raises(OverloadError):
                OutCh.new(pairs=[(_signal(), kr(1))])


# ---------------------------------------------------------------------------
# Looping (looping.py)
# ---------------------------------------------------------------------------


class TestLooping:
    def test_flooper2(self):
        output = Flooper2.new(
            amplitude=kr(1),
            pitch=kr(1),
            loop_start=kr(0),
            loop_end=kr(1),
            crossfade=kr(0.05),
            table=FTable(1),
        )
        assert output.rate is Rate.AUDIO
        assert len(output.node.inputs) == 10

    def test_flooper2_needs_control_rates(self):
        with pytest.raises(OverloadError):
            Flooper2.new(
                amplitude=1,
                pitch=kr(1),
                loop_start=kr(0),
                loop_end=kr(1),
                crossfade=kr(0.05),
                table=FTable(1),
            )

    def test_sndloop(self):
        node = SndLoop.new(
            source=_signal(), pitch=kr(1), trigger=kr(1), duration=2, fade=0.05
        )
        assert node.output_rates == (Rate.AUDIO, Rate.CONTROL)


# ---------------------------------------------------------------------------
# Sound files (diskio.py)
# ---------------------------------------------------------------------------


class TestDiskIO:
    def test_soundin_channels(self):
        assert SoundIn.new(filename="mono.wav").rate is Rate.AUDIO
        node = SoundIn.new(filename="quad.wav", channel_count=4)
        assert node.output_rates == (Rate.AUDIO,) * 4

    def test_diskin2_default_pitch(self):
        node = DiskIn2.new(filename="stereo.wav", channel_count=2)
        assert node.input_rates[:2] == (Rate.STRING, Rate.CONTROL)
        assert len(node) == 2

    def test_mp3in(self):
        node = Mp3In.new(filename="song.mp3")
        assert len(node) == 2
        assert node.output_rates == (Rate.AUDIO, Rate.AUDIO)

    def test_mp3in_needs_string(self):
        with pytest.raises(OverloadError):
            Mp3In.new(filename=1)

    @pytest.mark.parametrize(
        "opcode_cls", [FileLen, FileSr, FileNchnls, FilePeak, FileBit]
    )
    def test_file_queries(self, opcode_cls):
        output = opcode_cls.new(filename="loop.wav")
        assert output.rate is Rate.INIT
        assert output.node.input_rates == (Rate.STRING, Rate.INIT)

    def test_fout(self):
        def build(builder):
            left, right = Mp3In.new(filename="song.mp3")
            return FOut.new(filename="copy.wav", format=14, sources=[left, right])

        node, _ = _build(build)
        assert node.is_effect
        assert node.input_rates == (
            Rate.STRING,
            Rate.INIT,
            Rate.AUDIO,
            Rate.AUDIO,
        )


# ---------------------------------------------------------------------------
# Rate conversion (converters.py)
# ---------------------------------------------------------------------------


class TestConverters:
    def test_round_trip_rates(self):
        signal = _signal()
        control = DownSamp.new(source=signal)
        assert control.rate is Rate.CONTROL
        assert Interp.new(source=control).rate is Rate.AUDIO
        with pytest.raises(OverloadError):
            DownSamp.new(source=control)


# ---------------------------------------------------------------------------
# Printing and strings (printing.py, strings.py)
# ---------------------------------------------------------------------------


class TestPrintingAndStrings:
    def test_print(self):
        def build(builder):
            Print.new(values=[1, 2, 3])
            PrintK.new(interval=0.5, value=kr(1))

        _, instrument = _build(build)
        assert len(instrument.effects) == 2

    def test_print_rejects_signals(self):
        with InstrumentBuilder():
            with pytest.raises(OverloadError):
                Print.new(values=[kr(1)])

    def test_sprintf(self):
        text = Sprintf.new(format="%d:%d", values=[1, 2])
        assert text.rate is Rate.STRING
        assert SprintfK.new(format="%f", values=[kr(1)]).rate is Rate.STRING
        with pytest.raises(OverloadError):
            Sprintf.new(format="%f", values=[kr(1)])

    @pytest.mark.parametrize("opcode_cls", [StrCat, StrCatK])
    def test_strcat(self, opcode_cls):
        joined = opcode_cls.new(left="loop", right=".wav")
        assert joined.rate is Rate.STRING
        assert opcode_cls.new(left=joined, right="!").rate is Rate.STRING
