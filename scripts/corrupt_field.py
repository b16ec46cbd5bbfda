import sys
from pathlib import Path

from amiibo_core.formats import read_image, write_image
from amiibo_core.protocol import FIELDS, Domain

def main():
    packed = sorted(n for n, f in FIELDS.items() if f.domain is Domain.PACKED)
    if len(sys.argv) != 3 or sys.argv[2] not in packed:
        print(f"Usage: corrupt_field.py <dump> <{'|'.join(packed)}>")
        raise SystemExit(2)

    p = Path(sys.argv[1])
    field = FIELDS[sys.argv[2]]
    image = read_image(p)
    if len(image) < field.end:
        print("File too small to corrupt safely.")
        raise SystemExit(2)

    # Flip the low bit of the field's last byte.
    idx = field.end - 1
    image[idx] ^= 0x01
    write_image(p, image)
    print(f"Corrupted 1 byte at offset {idx} ({field.name}) in {p}")

if __name__ == "__main__":
    main()
