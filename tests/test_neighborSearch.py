# -- Spatial Hash Grid Tests -- #

import numpy as np
import pytest

from sphCanvas.sph.neighborSearch import SpatialHashGrid


def bruteForcePairs(positions, radius):
    pairs = {}
    n = len(positions)
    for i in range(n):
        for j in range(i + 1, n):
            d = float(np.linalg.norm(positions[i] - positions[j]))
            if d < radius:
                pairs[(i, j)] = d
    return pairs


@pytest.fixture
def scattered(rng):
    return rng.uniform(0.0, 400.0, size=(250, 2))


def testLookupSortedWithEveryIndexOnce(scattered):
    grid = SpatialHashGrid(25.0)
    grid.rebuild(scattered)
    lookup = grid.spatialLookup

    assert lookup.shape == (len(scattered), 2)
    assert np.all(np.diff(lookup[:, 0]) >= 0)
    assert sorted(lookup[:, 1].tolist()) == list(range(len(scattered)))


def testStartIndicesMarkContiguousRuns(scattered):
    grid = SpatialHashGrid(25.0)
    grid.rebuild(scattered)
    lookup = grid.spatialLookup
    starts = grid.startIndices

    assert set(starts) == set(lookup[:, 0].tolist())
    for key, start in starts.items():
        assert lookup[start, 0] == key
        if start > 0:
            assert lookup[start - 1, 0] != key

    # Each key appears in exactly one run
    keys = lookup[:, 0]
    runBreaks = np.count_nonzero(np.diff(keys)) + 1
    assert runBreaks == len(starts)


def testKeysMatchCellOfEachParticle(scattered):
    grid = SpatialHashGrid(25.0)
    grid.rebuild(scattered)
    for key, index in grid.spatialLookup.tolist():
        cx, cy = grid.cellCoord(*scattered[index])
        assert grid.cellKey(cx, cy) == key


def testStableOrderWithinCell():
    positions = np.array([[1.0, 1.0], [2.0, 2.0], [3.0, 1.0], [50.0, 50.0]])
    grid = SpatialHashGrid(10.0)
    grid.rebuild(positions)
    lookup = grid.spatialLookup
    sameCell = lookup[lookup[:, 0] == lookup[0, 0], 1]
    assert sameCell.tolist() == [0, 1, 2]


def testNeighborAcrossCellBoundary():
    '''Particles straddling a cell edge still find each other.'''
    positions = np.array([[9.9, 5.0], [10.1, 5.0]])
    grid = SpatialHashGrid(10.0)
    grid.rebuild(positions)

    assert grid.cellCoord(9.9, 5.0) != grid.cellCoord(10.1, 5.0)

    indices, distances = grid.neighborsWithinRadius(9.9, 5.0)
    assert sorted(indices.tolist()) == [0, 1]
    assert distances[indices.tolist().index(1)] == pytest.approx(0.2)


def testNeighborsMatchBruteForce(scattered):
    radius = 30.0
    grid = SpatialHashGrid(radius)
    grid.rebuild(scattered)

    for x, y in [(200.0, 200.0), (0.0, 0.0), (399.0, 10.0), (-20.0, 150.0)]:
        indices, distances = grid.neighborsWithinRadius(x, y)
        expected = np.nonzero(np.linalg.norm(scattered - [x, y], axis=1) < radius)[0]
        assert sorted(indices.tolist()) == expected.tolist()
        assert np.allclose(distances, np.linalg.norm(scattered[indices] - [x, y], axis=1))


def testExactRadiusExcluded():
    grid = SpatialHashGrid(10.0)
    grid.rebuild(np.array([[0.0, 0.0], [10.0, 0.0]]))
    indices, _ = grid.neighborsWithinRadius(0.0, 0.0)
    assert indices.tolist() == [0]


def testQueryWithinRadiusCallback():
    grid = SpatialHashGrid(10.0)
    grid.rebuild(np.array([[0.0, 0.0], [3.0, 4.0], [30.0, 0.0]]))
    seen = []
    grid.queryWithinRadius(0.0, 0.0, lambda index, distance: seen.append((index, distance)))
    assert sorted(seen) == [(0, 0.0), (1, 5.0)]


def testQueryPairsMatchesBruteForce(scattered):
    radius = 30.0
    grid = SpatialHashGrid(radius)
    grid.rebuild(scattered)
    iIdx, jIdx, dist = grid.queryPairs()

    assert np.all(iIdx < jIdx)
    found = {(int(i), int(j)): float(d) for i, j, d in zip(iIdx, jIdx, dist)}
    assert len(found) == len(iIdx)

    expected = bruteForcePairs(scattered, radius)
    assert set(found) == set(expected)
    for pair, d in expected.items():
        assert found[pair] == pytest.approx(d)


def testNegativeCoordinates():
    positions = np.array([[-5.0, -5.0], [4.0, 4.0], [-15.0, 3.0]])
    grid = SpatialHashGrid(10.0)
    grid.rebuild(positions)
    _, jIdx, _ = grid.queryPairs()
    assert len(jIdx) == len(bruteForcePairs(positions, 10.0))


def testCellKeyOutsideBounds():
    grid = SpatialHashGrid(10.0)
    grid.rebuild(np.array([[5.0, 5.0], [25.0, 15.0]]))
    assert grid.cellKey(0, 0) is not None
    assert grid.cellKey(-1, 0) is None
    assert grid.cellKey(3, 0) is None
    assert grid.cellKey(0, 2) is None


def testEmptyGrid():
    grid = SpatialHashGrid(10.0)
    grid.rebuild(np.zeros((0, 2)))
    assert grid.nParticles == 0
    assert grid.spatialLookup.shape == (0, 2)
    assert grid.startIndices == {}
    indices, distances = grid.neighborsWithinRadius(1.0, 1.0)
    assert len(indices) == 0 and len(distances) == 0
    assert all(len(a) == 0 for a in grid.queryPairs())


def testNonPositiveRadiusReportsNothing():
    grid = SpatialHashGrid(0.0)
    grid.rebuild(np.array([[1.0, 1.0], [1.0, 1.0]]))
    indices, _ = grid.neighborsWithinRadius(1.0, 1.0)
    assert len(indices) == 0
    assert all(len(a) == 0 for a in grid.queryPairs())
    with pytest.raises(ValueError):
        grid.cellCoord(1.0, 1.0)


def testRebuildCopiesPositions():
    positions = np.array([[1.0, 1.0], [2.0, 2.0]])
    grid = SpatialHashGrid(10.0)
    grid.rebuild(positions)
    positions[1] = [500.0, 500.0]
    indices, _ = grid.neighborsWithinRadius(1.0, 1.0)
    assert sorted(indices.tolist()) == [0, 1]
