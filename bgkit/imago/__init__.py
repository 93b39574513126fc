"""Image reading and writing (PPM, Targa, LBM, PNG, RGBE, JPEG) and pixel-format conversion."""