# bgkit

Two small libraries in one package:

- `bgkit.imago` reads and writes images in several file formats (PPM/PGM,
  Targa, ILBM/PBM, PNG, Radiance RGBE/HDR and JPEG) and converts pixel
  buffers between pixel formats.
- `bgkit.treestore` holds a tree of named nodes with named attributes and
  reads and writes it in a simple brace-delimited text format.

## Installation

```
pip install .
```

Pillow is the only dependency; it is used for PNG and JPEG coding and for
reducing colours when writing LBM files.

## Images

```python
from bgkit.imago import api
from bgkit.imago.formats import PixelFormat

img = api.load("picture.ppm")          # returns a Pixmap
print(img.width, img.height, img.fmt)

img.convert(PixelFormat.RGBA32)
img.set_pixel4i(0, 0, 255, 0, 0, 255)
api.save(img, "picture.tga")           # file type chosen by the suffix
```

`api.load` and `api.read` detect the file type from the data itself.
`api.save` names the pixmap after the file and `api.write` picks the type from
the suffix of `pixmap.name`; without a name or with an unknown suffix the
image is written as Targa. Failures raise `ImageError` from
`bgkit.imago.formats`.

For raw pixel data:

```python
pixels, width, height = api.load_pixels("picture.png", PixelFormat.RGB24)
api.save_pixels("copy.ppm", pixels, width, height, PixelFormat.RGB24)
```

### Pixmaps and pixel formats

`Pixmap` (in `bgkit.imago.pixmap`) holds `width`, `height`, `fmt`, `name`
and a `pixels` bytearray. Float components are little-endian 32-bit floats.

`PixelFormat` lists `GREY8`, `RGB24`, `RGBA32`, `GREYF`, `RGBF`, `RGBAF`,
`BGRA32` and `RGB565`. A pixmap moves between them with `convert`,
`set_format`, `to_float` and `to_integer`; single pixels are read and
written with `get_pixel`/`set_pixel` (raw bytes) and the `get_pixel1i`,
`get_pixel4f`, `set_pixel4i`, ... helpers. `bgkit.imago.conv` offers the
same conversions on plain buffers (`unpack`, `pack`, `convert_pixels`).

`bgkit.imago.formats` also gives `pixel_size`, `is_float`, `has_alpha`,
`is_greyscale`, and the OpenGL enumerants for a format (`gl_format`,
`gl_type`, `gl_internal_format`).

### File types

Each type has its own module with `check`, `read` and `write` functions
working on seekable binary streams; `bgkit.imago.registry.Registry` collects
them, and `api.default_registry()` returns the one holding all of them.

| Module | Suffixes | Reads | Writes |
| --- | --- | --- | --- |
| `ppm` | .ppm .pgm .pnm | P6, P5 and text P3; maxval above 255 gives float pixmaps | P6/P5, 8 bit or 16 bit for float images |
| `tga` | .tga .targa | raw and RLE true colour | uncompressed true colour, top-down |
| `lbm` | .lbm .ilbm .iff | ILBM and PBM, up to 8 planes, to RGB24 | uncompressed 8-bit paletted PBM |
| `png` | .png | 8 bit grey/RGB/RGBA; 16 bit becomes float | 8 bit grey/RGB/RGBA |
| `rgbe` | .rgbe .pic .hdr | flat and run-length encoded, to RGBF | run-length encoded |
| `jpeg` | .jpg .jpeg | to RGB24 | quality 95 |

`bgkit.imago.rgbe` also exposes `read_header`, `write_header`, `RgbeHeader`,
`float_to_rgbe` and `rgbe_to_float`.

### What it does not do

- It does not create OpenGL textures; it only reports the matching OpenGL
  enumerants.
- Targa reading accepts true colour images only, not colour-mapped or
  black-and-white ones.
- LBM colour-cycling ranges are skipped, and images with more than 8 planes
  are refused.
- 16-bit colour PNG images are decoded at 8-bit precision before being
  turned into float pixels.

## Tree store

The text format looks like this:

```
scene {
	name = "demo"
	camera {
		fov = 60
		pos = [0, 1.5, -10]
	}
}
```

`#` starts a comment running to the end of the line. Values are numbers,
quoted strings, bare identifiers (read as strings) and bracketed arrays of
at least two elements, which may nest.

```python
from bgkit.treestore import text

root = text.load("scene.ts")
print(root.lookup_num("scene.camera.fov", 45.0))
print(root.lookup_vec("scene.camera.pos", None))
text.save(root, "scene-copy.ts")
```

`text` provides `loads`/`dumps` for strings, `load_stream`/`save_stream` for
text or binary streams, and `load`/`save` for files. Malformed input raises
`ParseError`, which carries the line number.

`bgkit.treestore.tree` has the data model: `Node` (attributes, children,
`get_attr_*` accessors and dotted-path `lookup_*` helpers whose first
component names the node itself), `Attr`, and `Value` with `ValueType`
(`STRING`, `NUMBER`, `VECTOR`, `ARRAY`). Build values with
`Value.from_str`, `from_int`, `from_float`, `from_ints`, `from_floats` and
`from_values`.

## Tests

```
pip install .[test]
pytest
```