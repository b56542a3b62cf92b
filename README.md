# vcmfilters

Noise-reduction filters for planar video frames, built on numpy.

A `Frame` (in `vcmfilters.formats`) holds one numpy array per plane. The
planes are Y/U/V, R/G/B or a single gray plane. Its `VideoFormat` gives the
colour family, the sample type (integers of 8 to 16 bits, or 16/32-bit
float), and the chroma subsampling. You create each filter for one format.
Calling `process(frame)` on it returns a new `Frame` and leaves the input
unchanged. If an argument is out of range, or a frame does not match the
filter's format, the filter raises `FilterError`, which is a subclass of
`ValueError`.

## Installation

```
pip install vcmfilters
```

## Filters

| Module | Class | What it does |
| --- | --- | --- |
| `vcmfilters.median` | `AdaptiveMedian` | Adaptive median filter. Each grid starts at 3x3 and can grow up to `max_grid` (an odd number from 3 to 11, default 5). A pixel outside the grid's min/max range is replaced by the grid median. `planes` takes three 0/1 flags. RGB always filters all three planes. Half-float formats are rejected. |
| `vcmfilters.saltpepper` | `SaltPepper` | Removes isolated bright (salt) and dark (pepper) pixels. Each plane has a mode: 0 none, 1 salt, 2 pepper, 3 both (the default). `tol` runs from 0 to 5. `avg` chooses the neighbour average or the neighbour max/min as the replacement. |
| `vcmfilters.variance` | `Variance` | `measure(frame)` records the global variance inside a window. `process(frame)` then filters each pixel using its local grid mean and variance. |
| `vcmfilters.veed` | `Veed` | Separable Gaussian smoothing (`rad` and `strength` each 1 to 8). The change to a pixel is capped per plane by `plimit`/`mlimit` (0 to 10). For float formats these limits work out to zero, so float planes come back unchanged. |
| `vcmfilters.neural` | `Neural` | A single linear neuron over an `xpts` x `ypts` neighbourhood. It filters luma, or all three planes for RGB. |

The helper modules can be used on their own:

- `vcmfilters.median.ring_offsets` and `adaptive_median_plane` run the median filter on one numpy plane.
- `vcmfilters.saltpepper.desalt` and `depepper` work on one plane in place.
- `vcmfilters.variance.window_mean`, `window_variance` and `variance_grid` work on one plane.
- `vcmfilters.veed.gaussian_kernel` and `veed_plane` work on one plane.
- `vcmfilters.offsets.linear_offsets`, `rect_grid_offsets` and `circular_offsets` build flat offset tables. `mean_value` and `variance` compute statistics over those tables.
- `vcmfilters.symmetry.paint_4fold`, `paint_4fold_checked`, `copy_4fold` and `copy_4fold_checked` set or copy four points placed symmetrically around a centre.
- `vcmfilters.rprop` provides the resilient back-propagation step (`adjust_weights`, `RpropParams`) used for training.

## Example

```python
from vcmfilters.formats import ColorFamily, Frame, SampleType, VideoFormat
from vcmfilters.median import AdaptiveMedian
from vcmfilters.saltpepper import SaltPepper

fmt = VideoFormat(ColorFamily.GRAY, SampleType.INTEGER, 8)
frame = Frame.blank(fmt, 64, 48)
frame.planes[0][:] = 120
frame.planes[0][10, 10] = 255  # a salt pixel

cleaned = SaltPepper(fmt, planes=(3, 0, 0), tol=3, avg=True).process(frame)
smoothed = AdaptiveMedian(fmt, max_grid=5, planes=(1, 1, 1)).process(cleaned)
```

Using the variance filter:

```python
from vcmfilters.variance import Variance

flt = Variance(fmt, width=64, height=48, num_frames=1,
               lx=4, wd=40, ty=4, ht=30, xgrid=5, ygrid=5)
flt.measure(frame)
result = flt.process(frame)
```

## Training a neural filter

`train` needs a source frame and a trainer frame that shows the result you
want. Both must have the same format and size. The training window must
cover at least 10000 pixels.

```python
import numpy as np
from vcmfilters.neural import Neural, load_model, save_model, train

rng = np.random.default_rng(0)
clean = Frame(fmt, [rng.integers(0, 256, (160, 210), dtype=np.uint8)])
noisy = Frame(fmt, [np.clip(clean.planes[0] + rng.integers(-8, 9, (160, 210)), 0, 255)])

result = train(noisy, clean, fmt, xpts=3, ypts=3, tlx=3, tty=3,
               trx=200, tby=150, iterations=200, best_of=1, wset=False)
save_model("weights.txt", result, fmt)
model = load_model("weights.txt", fmt)
output = Neural(fmt, model).process(noisy)
```

`train` returns a `TrainingResult` with these fields:

- `model`: the best `NeuralModel` found.
- `min_error_sum`: its squared error.
- `best_set` and `best_iteration`: where that model was found.
- `cases`: the number of training points.
- `error_sums`: the full error record.

`save_model` writes the weights and the error record to a text file.
`load_model` reads the file back and checks that it matches the format.

## What the package does not do

- It does not read or write video or image files.
- It provides no command-line tool.

You supply frames as numpy arrays and get numpy arrays back. The geometry
support stops at the four-fold symmetry helpers: there are no rotation,
perspective or lens-distortion filters. There are also no frequency-domain
filters.

## Running the tests

```
pip install "vcmfilters[test]"
pytest
```