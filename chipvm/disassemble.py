"""Human-readable descriptions of decoded CHIP-8 instructions."""

from chipvm.decode import DecodedInstruction, is_supported

_ALU_MNEMONICS = {
    0x0: "V{x:X} = V{y:X}",
    0x1: "V{x:X} |= V{y:X}",
    0x2: "V{x:X} &= V{y:X}",
    0x3: "V{x:X} ^= V{y:X}",
    0x4: "V{x:X} += V{y:X}, VF = carry",
    0x5: "V{x:X} -= V{y:X}, VF = not borrow",
    0x6: "V{x:X} >>= 1, VF = shifted bit",
    0x7: "V{x:X} = V{y:X} - V{x:X}, VF = not borrow",
    0xE: "V{x:X} <<= 1, VF = shifted bit",
}

_MISC_MNEMONICS = {
    0x07: "V{x:X} = delay timer",
    0x0A: "Wait for key, store in V{x:X}",
    0x15: "Delay timer = V{x:X}",
    0x18: "Sound timer = V{x:X}",
    0x1E: "I += V{x:X}",
    0x29: "I = font glyph for V{x:X}",
    0x33: "Store BCD of V{x:X} at I",
    0x55: "Store V0..V{x:X} at I",
    0x65: "Load V0..V{x:X} from I",
}


def disassemble(instruction: DecodedInstruction) -> str:
    """Describe what an instruction does, or flag it as unimplemented."""
    if not is_supported(instruction):
        return "Unimplemented opcode"

    i = instruction
    opcode = i.opcode
    if opcode == 0x0:
        return "Clear screen" if i.nn == 0xE0 else "Return from subroutine"
    if opcode == 0x1:
        return f"Jump to 0x{i.nnn:03X}"
    if opcode == 0x2:
        return f"Call subroutine at 0x{i.nnn:03X}"
    if opcode == 0x3:
        return f"Skip next if V{i.x:X} == 0x{i.nn:02X}"
    if opcode == 0x4:
        return f"Skip next if V{i.x:X} != 0x{i.nn:02X}"
    if opcode == 0x5:
        return f"Skip next if V{i.x:X} == V{i.y:X}"
    if opcode == 0x6:
        return f"Set V{i.x:X} = 0x{i.nn:02X}"
    if opcode == 0x7:
        return f"Set V{i.x:X} += 0x{i.nn:02X}"
    if opcode == 0x8:
        return _ALU_MNEMONICS[i.n].format(x=i.x, y=i.y)
    if opcode == 0x9:
        return f"Skip next if V{i.x:X} != V{i.y:X}"
    if opcode == 0xA:
        return f"Set I = 0x{i.nnn:03X}"
    if opcode == 0xB:
        return f"Jump to 0x{i.nnn:03X} + offset register"
    if opcode == 0xC:
        return f"Set V{i.x:X} = random & 0x{i.nn:02X}"
    if opcode == 0xD:
        return f"Draw {i.n}-row sprite at (V{i.x:X}, V{i.y:X}) from I, VF = collision"
    if opcode == 0xE:
        verb = "pressed" if i.nn == 0x9E else "not pressed"
        return f"Skip next if key V{i.x:X} {verb}"
    return _MISC_MNEMONICS[i.nn].format(x=i.x)
