"""HOG features, linear SVM inference and the model file codec."""
