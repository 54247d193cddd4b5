import argparse
import os
from typing import List, Tuple
from PIL import Image, ImageDraw, ImageFont

colors = [
    (255, 100, 100),  # Red
    (100, 255, 100),  # Green
    (100, 100, 255),  # Blue
    (255, 255, 100),  # Yellow
    (255, 100, 255),  # Magenta
    (100, 255, 255),  # Cyan
    (255, 150, 100),  # Orange
    (150, 100, 255),  # Purple
]

# name, width, height
SHAPES = {
    'portrait': (900, 1600),
    'landscape': (1600, 900),
    'square': (1200, 1100),
}


def _load_font(size: int):
    for path in ("/System/Library/Fonts/Helvetica.ttc", "DejaVuSans.ttf"):
        try:
            return ImageFont.truetype(path, size)
        except OSError:
            continue
    return ImageFont.load_default()


def create_test_image(path: str, width: int, height: int, label: str, color: Tuple[int, int, int]):
    """Vertical gradient with a centred label"""
    img = Image.new('RGB', (width, height))
    draw = ImageDraw.Draw(img)

    dark = tuple(max(0, c - 100) for c in color)
    for y in range(height):
        ratio = y / height
        fill = tuple(int(color[i] * (1 - ratio) + dark[i] * ratio) for i in range(3))
        draw.rectangle([(0, y), (width, y + 1)], fill=fill)

    font = _load_font(max(12, min(width, height) // 10))
    bbox = draw.textbbox((0, 0), label, font=font)
    x = (width - (bbox[2] - bbox[0])) // 2
    y = (height - (bbox[3] - bbox[1])) // 2
    draw.text((x + 5, y + 5), label, fill=(0, 0, 0), font=font)
    draw.text((x, y), label, fill=(255, 255, 255), font=font)

    img.save(path, quality=90)


def create_test_images(directory: str, portrait: int = 6, landscape: int = 6, square: int = 3,
                       scale: float = 1.0) -> List[str]:
    """Write a mix of portrait, landscape and square JPEGs, returning their paths"""
    os.makedirs(directory, exist_ok=True)
    paths = []
    index = 0
    for shape, count in (('portrait', portrait), ('landscape', landscape), ('square', square)):
        width, height = SHAPES[shape]
        width, height = max(1, int(width * scale)), max(1, int(height * scale))
        for i in range(count):
            index += 1
            path = os.path.join(directory, f"test_image_{index:02d}_{shape}.jpg")
            create_test_image(path, width, height, f"{shape.title()} {i + 1}", colors[index % len(colors)])
            paths.append(path)
    return paths


def main():
    parser = argparse.ArgumentParser(description="Generate sample photos for Dozeframe")
    parser.add_argument('directory', nargs='?', default='images')
    parser.add_argument('--portrait', type=int, default=6)
    parser.add_argument('--landscape', type=int, default=6)
    parser.add_argument('--square', type=int, default=3)
    args = parser.parse_args()

    paths = create_test_images(args.directory, args.portrait, args.landscape, args.square)
    for path in paths:
        print(f"Created {path}")
    print(f"\nTest images created successfully!")
    print(f"You can now run: uv run python main.py {args.directory}")


if __name__ == "__main__":
    main()
