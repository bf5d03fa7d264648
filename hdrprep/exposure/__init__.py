"""*********************************************************************************************************************
*                                                                                                                      *
*                                                                                                                      *
*                                                                                                                      *
*                                                                                                                      *
* -------------------------------------------------------------------------------------------------------------------- *
*                                                                                                                      *
*    METADATA:                                                                                                         *
*                                                                                                                      *
*        File:    __init__.py                                                                                          *
*        Project: hdrprep                                                                                              *
*        Version: 0.1.0                                                                                                *
*        Created: 2026-10-18                                                                                           *
*        Author:  Jess Mann                                                                                            *
*        Email:   jess.a.mann@gmail.com                                                                                *
*        Copyright (c) 2026 Jess Mann                                                                                  *
*                                                                                                                      *
* -------------------------------------------------------------------------------------------------------------------- *
*                                                                                                                      *
*    LAST MODIFIED:                                                                                                    *
*                                                                                                                      *
*        2026-10-18     By Jess Mann                                                                                   *
*                                                                                                                      *
*********************************************************************************************************************"""
from hdrprep.exposure.pixels import PixelPlane, PixelFrame, PlanarFrame, PackedFrame
from hdrprep.exposure.colorspace import rgb_to_hsl, hsl_to_rgb, average_lightness, max_lightness
from hdrprep.exposure.item import ExposureItem, InputKind, MISSING_EXPOSURE
from hdrprep.exposure.exposureset import ExposureSet
from hdrprep.exposure.events import ExposureListener, LoggingListener, ProgressListener
