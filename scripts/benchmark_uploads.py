from __future__ import annotations

import argparse
import io
import time

import requests
from PIL import Image, ImageDraw


def make_image(width: int, height: int) -> bytes:
    img = Image.new('RGB', (width, height), 'white')
    draw = ImageDraw.Draw(img)
    draw.rectangle((width // 8, height // 8, width - width // 8, height - height // 8), fill='green')
    out = io.BytesIO()
    img.save(out, format='PNG')
    return out.getvalue()


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument('collection')
    parser.add_argument('--url', default='http://127.0.0.1:8000')
    parser.add_argument('--count', type=int, default=10)
    parser.add_argument('--width', type=int, default=256)
    parser.add_argument('--height', type=int, default=256)
    args = parser.parse_args()

    rules = requests.get(f"{args.url}/api/collections/{args.collection}/rules", timeout=10)
    rules.raise_for_status()

    image = make_image(args.width, args.height)
    started = time.time()
    statuses: dict[int, int] = {}

    for _ in range(args.count):
        resp = requests.post(
            f"{args.url}/api/collections/{args.collection}/validate",
            files={'file': ('bench.png', image, 'image/png')},
            timeout=30,
        )
        statuses[resp.status_code] = statuses.get(resp.status_code, 0) + 1

    elapsed = time.time() - started
    print({
        'rules': rules.json()['rules'],
        'submitted': args.count,
        'statuses': statuses,
        'elapsed_sec': round(elapsed, 2),
        'rps': round(args.count / elapsed, 2),
    })


if __name__ == '__main__':
    main()
