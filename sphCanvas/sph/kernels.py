# -- SPH Smoothing Kernels -- #

'''
Smoothing kernel for the 2D SPH canvas.

The kernel is the quadratic "spiky" profile

    W(d) = 6 (r - d)^2 / (pi r^4)        for 0 <= d < r
    W(d) = 0                              for d >= r

with r the smoothing radius. It integrates to one over the disc of
radius r, is strictly decreasing inside the support and reaches zero
continuously at d = r. Its radial derivative

    dW/dd = 12 (d - r) / (pi r^4)

is negative inside the support, so pressure forces built from it
push particles apart when the shared pressure is positive.

References:
-----------
Muller et al. (2003) -- Particle-Based Fluid Simulation for
    Interactive Applications
'''

from __future__ import annotations

import math
from typing import Protocol

import numpy as np


######################################################################
# -- Kernel Protocol -- #
######################################################################

class SphKernel(Protocol):
    '''Protocol for radially symmetric smoothing kernels.'''

    @property
    def smoothingRadius(self) -> float:
        '''Cutoff distance of the kernel support.'''
        ...

    def evaluate(self, distance: float) -> float:
        '''Kernel value W(d).'''
        ...

    def derivative(self, distance: float) -> float:
        '''Radial derivative dW/dd.'''
        ...

    def evaluateBatch(self, distances: np.ndarray) -> np.ndarray:
        ...

    def derivativeBatch(self, distances: np.ndarray) -> np.ndarray:
        ...


######################################################################
# -- Spiky Kernel -- #
######################################################################

class SpikyKernel:
    '''
    Quadratic spiky kernel with compact support at d = r.

    A non-positive smoothing radius yields a kernel that is zero
    everywhere.

    Parameters:
    -----------
    smoothingRadius : float
        Support radius r [px]
    '''

    def __init__(self, smoothingRadius: float) -> None:
        self._radius = float(smoothingRadius)
        if self._radius > 0.0:
            radius4 = self._radius ** 4
            self._valueScale = 6.0 / (math.pi * radius4)
            self._slopeScale = 12.0 / (math.pi * radius4)
        else:
            self._valueScale = 0.0
            self._slopeScale = 0.0

    @property
    def smoothingRadius(self) -> float:
        return self._radius

    def evaluate(self, distance: float) -> float:
        '''
        Evaluate W(d).

        Parameters:
        -----------
        distance : float
            Distance from the kernel centre [px]

        Returns:
        --------
        float : Kernel value [1/px^2]
        '''
        if distance >= self._radius:
            return 0.0
        gap = self._radius - distance
        return gap * gap * self._valueScale

    def derivative(self, distance: float) -> float:
        '''
        Evaluate dW/dd.

        Parameters:
        -----------
        distance : float
            Distance from the kernel centre [px]

        Returns:
        --------
        float : Radial slope [1/px^3], <= 0
        '''
        if distance >= self._radius:
            return 0.0
        return (distance - self._radius) * self._slopeScale

    ######################################################################
    # -- Vectorized (Batch) Operations -- #
    ######################################################################

    def evaluateBatch(self, distances: np.ndarray) -> np.ndarray:
        '''
        Evaluate W(d) for an array of distances.

        Parameters:
        -----------
        distances : np.ndarray
            Distances [px], shape (N,)

        Returns:
        --------
        np.ndarray : Kernel values, shape (N,)
        '''
        distances = np.asarray(distances, dtype=np.float64)
        gap = np.maximum(self._radius - distances, 0.0)
        return gap * gap * self._valueScale

    def derivativeBatch(self, distances: np.ndarray) -> np.ndarray:
        '''
        Evaluate dW/dd for an array of distances.

        Parameters:
        -----------
        distances : np.ndarray
            Distances [px], shape (N,)

        Returns:
        --------
        np.ndarray : Radial slopes, shape (N,)
        '''
        distances = np.asarray(distances, dtype=np.float64)
        inside = distances < self._radius
        return np.where(inside, (distances - self._radius) * self._slopeScale, 0.0)
